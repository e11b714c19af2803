# Settings blueprint: backend URL panel. Never guarded, so a dead backend can be reconfigured.
from __future__ import annotations

from flask import Blueprint, current_app, flash, make_response, redirect, render_template, request, session, url_for
from flask_babel import gettext as _

from forms import BackendUrlForm, ConfirmForm
from services.backend_url import get_backend_url, normalize_backend_url, set_backend_url
from services.health import HealthMonitor, check_backend_health
from utils.cache_helpers import invalidate_all

bp = Blueprint('settings', __name__, url_prefix='/settings')

# Origin of the last successful "Test Connection"; Save is only accepted for it
TESTED_URL_KEY = 'tested_backend_url'


def _safe_next(target: str | None) -> str:
    if target and target.startswith('/') and not target.startswith('//'):
        return target
    return url_for('main.dashboard')


@bp.route('', methods=['GET', 'POST'], endpoint='settings')
def settings():
    form = BackendUrlForm()
    test_result = None
    if request.method == 'GET':
        form.url.data = get_backend_url()
        session.pop(TESTED_URL_KEY, None)
    elif form.validate_on_submit():
        try:
            normalized = normalize_backend_url(form.url.data)
        except ValueError as e:
            flash(str(e) or _('Invalid URL'), 'danger')
            test_result = {'ok': False, 'latency': 0, 'message': str(e) or _('Invalid URL'), 'data': None}
            session.pop(TESTED_URL_KEY, None)
        else:
            if form.save.data:
                if session.get(TESTED_URL_KEY) != normalized:
                    flash(_('Test the connection before saving'), 'warning')
                else:
                    return _save(normalized)
            else:
                test_result = check_backend_health(normalized)
                if test_result['ok']:
                    session[TESTED_URL_KEY] = normalized
                    flash(_('Connection successful'), 'success')
                else:
                    session.pop(TESTED_URL_KEY, None)
                    flash(_('Connection failed'), 'danger')
            form.url.data = normalized
    return render_template('settings.html', form=form, test_result=test_result,
                           current_url=get_backend_url(), monitor=HealthMonitor.load(),
                           can_save=session.get(TESTED_URL_KEY) is not None,
                           recheck_form=ConfirmForm())


def _save(normalized: str):
    response = make_response(redirect(url_for('settings.settings')))
    set_backend_url(response, normalized)
    session.pop(TESTED_URL_KEY, None)
    invalidate_all()
    current_app.logger.info('Backend URL set to %s', normalized)
    flash(_('Backend URL saved'), 'success')
    HealthMonitor.load().check(show_notice=True)
    return response


@bp.route('/recheck', methods=['POST'], endpoint='recheck')
def recheck():
    """Retry button on the "Backend Unavailable" page and the status card."""
    form = ConfirmForm()
    if form.validate_on_submit():
        HealthMonitor.load().check(show_notice=True)
    return redirect(_safe_next(request.args.get('next') or request.form.get('next')))
