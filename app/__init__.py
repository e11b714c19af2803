import os
from datetime import datetime

import pytz
from flask import Flask, render_template, request
from flask_babel import lazy_gettext as _l

from extensions import babel, cache, csrf


def create_app(config_class=None):
    base_dir = os.path.dirname(os.path.abspath(__file__))
    project_root = os.path.abspath(os.path.join(base_dir, '..'))
    template_dir = os.path.join(project_root, 'templates')
    static_dir = os.path.join(project_root, 'static')
    app = Flask(
        __name__,
        template_folder=template_dir,
        static_folder=static_dir,
        static_url_path='/static'
    )

    # Honor reverse proxy headers, fix scheme/host/port
    from werkzeug.middleware.proxy_fix import ProxyFix
    app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1, x_port=1, x_prefix=1)

    # Load configuration
    if config_class is None:
        from config import Config
        config_class = Config
    app.config.from_object(config_class)
    app.config.setdefault('WTF_CSRF_SECRET_KEY', app.config['SECRET_KEY'])

    # Timezone helpers for templates
    tz_name = app.config.get('LOCAL_TIMEZONE', 'Asia/Jakarta')
    try:
        local_tz = pytz.timezone(tz_name)
    except pytz.UnknownTimeZoneError:
        app.logger.warning('Unknown LOCAL_TIMEZONE %r, falling back to UTC', tz_name)
        app.config['LOCAL_TIMEZONE'] = 'UTC'
        local_tz = pytz.utc

    def get_local_now():
        return datetime.now(local_tz)

    app.jinja_env.globals.setdefault('get_local_now', get_local_now)

    # Jinja filters for money and dates
    from utils.format import format_idr, format_local_datetime
    from services.order_totals import items_count, line_label, line_total, order_total

    app.jinja_env.filters['idr'] = format_idr
    app.jinja_env.filters['local_datetime'] = lambda v, fmt='%d %b %Y %H:%M': format_local_datetime(
        v, app.config['LOCAL_TIMEZONE'], fmt)
    app.jinja_env.globals.update(
        order_total=order_total,
        line_total=line_total,
        line_label=line_label,
        items_count=items_count,
    )

    # Inject common template globals (backend status + CSRF token helper)
    from flask_wtf.csrf import generate_csrf

    @app.context_processor
    def inject_globals():
        from services.backend_url import get_backend_url
        from services.health import HealthMonitor

        nav = [
            ('main.dashboard', '/', _l('Dashboard')),
            ('products.products', '/products', _l('Products')),
            ('orders.orders', '/orders', _l('Orders')),
            ('orders.calendar', '/orders/calendar', _l('Calendar')),
            ('settings.settings', '/settings', _l('Settings')),
        ]

        def nav_active(prefix: str) -> bool:
            path = request.path or '/'
            if prefix == '/':
                return path == '/'
            if prefix == '/orders':
                return path.startswith('/orders') and not path.startswith('/orders/calendar')
            return path == prefix or path.startswith(prefix + '/')

        return {
            'csrf_token': generate_csrf,
            'nav': nav,
            'nav_active': nav_active,
            'backend_url': get_backend_url(),
            'health': HealthMonitor.load(),
            'health_poll_seconds': app.config.get('HEALTH_POLL_SECONDS', 30),
        }

    # Bind extensions to the app
    babel.init_app(app)
    csrf.init_app(app)
    cache.init_app(app)

    # Register Blueprints
    from routes.main import bp as main_bp
    from routes.products import bp as products_bp
    from routes.orders import bp as orders_bp
    from routes.settings import bp as settings_bp
    app.register_blueprint(main_bp)
    app.register_blueprint(products_bp)
    app.register_blueprint(orders_bp)
    app.register_blueprint(settings_bp)

    _register_error_handlers(app)

    from logging_setup import setup_logging
    setup_logging(app)

    return app


def _register_error_handlers(app):
    from werkzeug.exceptions import RequestEntityTooLarge

    @app.errorhandler(404)
    def _not_found(e):
        return render_template('errors/404.html'), 404

    @app.errorhandler(RequestEntityTooLarge)
    def _too_large(e):
        return render_template('errors/413.html'), 413

    @app.errorhandler(500)
    def _server_error(e):
        return render_template('errors/500.html'), 500
