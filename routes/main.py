from flask import Blueprint, current_app, jsonify, render_template, request
from flask_babel import gettext as _

from routes.common import backend_guard, load_or_flash
from services.calendar_view import upcoming_pickups
from services.health import HealthMonitor, check_backend_health
from services.order_totals import order_total
from utils import cache_helpers
from utils.format import local_now, parse_iso

bp = Blueprint('main', __name__)


@bp.route('/', methods=['GET'], endpoint='dashboard')
def dashboard():
    blocked = backend_guard()
    if blocked is not None:
        return blocked

    products = load_or_flash(cache_helpers.get_products, _('Failed to load products'), default=[])
    orders = load_or_flash(cache_helpers.get_orders, _('Failed to load orders'), default=[])

    tz_name = current_app.config['LOCAL_TIMEZONE']
    today = local_now(tz_name).date()
    upcoming = upcoming_pickups(orders, tz_name, today, days=7)
    recent = sorted(orders, key=lambda o: parse_iso(o.get('createdAt')) or parse_iso('1970-01-01T00:00:00Z'),
                    reverse=True)[:5]
    return render_template(
        'dashboard.html',
        products_count=len(products),
        orders_count=len(orders),
        revenue=sum(order_total(o) for o in orders),
        upcoming=upcoming,
        recent=recent,
    )


@bp.route('/health', methods=['GET'], endpoint='health')
def health():
    """Polled by static/js/app.js. ``?notify=1`` on the first check of a page load."""
    monitor = HealthMonitor.load()
    result = check_backend_health()
    notice = monitor.record(result, show_notice=request.args.get('notify') == '1')
    monitor.save()
    body = dict(result)
    body['lastCheck'] = monitor.last_check
    body['notice'] = {'message': notice[0], 'category': notice[1]} if notice else None
    return jsonify(body)
