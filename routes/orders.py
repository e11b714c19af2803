# Orders blueprint: history, new/edit with line items, delete, print, pickup calendar.
from __future__ import annotations

import logging

from flask import Blueprint, abort, current_app, flash, redirect, render_template, request, url_for
from flask_babel import gettext as _

from forms import ConfirmForm, OrderForm
from routes.common import backend_guard, flash_backend_error, load_or_flash
from services.backend_api import BackendError, BackendNotFoundError
from services.calendar_view import build_month, resolve_month
from services.order_draft import DraftError, OrderDraft
from services.order_totals import ITEM_CUSTOM, catalog_by_id, item_type
from utils import cache_helpers
from utils.format import local_input_to_utc_iso, local_now, parse_formatted_number, to_local

log = logging.getLogger(__name__)

bp = Blueprint('orders', __name__, url_prefix='/orders')


@bp.before_request
def _require_backend():
    return backend_guard()


def _tz() -> str:
    return current_app.config['LOCAL_TIMEZONE']


def _load_order(order_id: int):
    try:
        return cache_helpers.get_order(order_id)
    except BackendNotFoundError:
        abort(404)
    except BackendError as e:
        flash_backend_error(e, _('Failed to load order'))
        abort(redirect(url_for('orders.orders')))


def _load_catalog():
    products = load_or_flash(cache_helpers.get_products, _('Failed to load products'), default=[])
    return products, catalog_by_id(products)


def _draft_from_form(form: OrderForm) -> OrderDraft:
    lines = []
    for entry in form.items.entries:
        f = entry.form
        if (f.item_type.data or '') == ITEM_CUSTOM:
            lines.append({
                'itemType': ITEM_CUSTOM,
                'customName': f.custom_name.data,
                'customPrice': f.custom_price.data,
                'notes': f.notes.data,
            })
            continue
        product_id = (f.product_id.data or '').strip()
        if not product_id.isdigit():
            continue
        lines.append({
            'itemType': 'product',
            'productId': int(product_id),
            'amount': f.amount.data,
            'priceAtSale': parse_formatted_number(f.price_at_sale.data) or None,
            'notes': f.notes.data,
        })
    return OrderDraft(lines)


def _bind_items(form: OrderForm, draft: OrderDraft) -> None:
    """Re-render the line-item rows from the draft."""
    while form.items.entries:
        form.items.pop_entry()
    for line in draft:
        if item_type(line) == ITEM_CUSTOM:
            form.items.append_entry({
                'item_type': ITEM_CUSTOM,
                'custom_name': line['customName'],
                'custom_price': str(line['customPrice']),
                'notes': line.get('notes') or '',
            })
        else:
            form.items.append_entry({
                'item_type': 'product',
                'product_id': str(line['productId']),
                'amount': str(line['amount']),
                'price_at_sale': '' if line.get('priceAtSale') is None else str(line['priceAtSale']),
                'notes': line.get('notes') or '',
            })


def _apply_action(action: str, form: OrderForm, draft: OrderDraft) -> None:
    """Draft edits triggered by the editor's buttons; errors are flashed."""
    try:
        if action.startswith('add_product:'):
            product_id = action.split(':', 1)[1].strip()
            if not product_id.isdigit():
                raise DraftError(_('Unknown product'))
            draft.add_product(int(product_id))
        elif action.startswith('remove:'):
            draft.remove(action.split(':', 1)[1])
        elif action == 'add_custom':
            price = parse_formatted_number(form.custom_price.data)
            draft.add_custom(form.custom_name.data, price if price else form.custom_price.data,
                             notes=form.custom_notes.data)
            form.custom_name.data = ''
            form.custom_price.data = ''
            form.custom_notes.data = ''
    except (DraftError, ValueError) as e:
        flash(str(e), 'danger')


def _order_payload(form: OrderForm, draft: OrderDraft, catalog, for_update: bool):
    payload = {
        'customerName': form.customer_name.data.strip(),
        'pickupDate': local_input_to_utc_iso(form.pickup_date.data, _tz()),
        'items': draft.to_payload(catalog),
    }
    notes = (form.notes.data or '').strip()
    if notes or for_update:
        payload['notes'] = notes
    return payload


def _editor(form: OrderForm, catalog, for_update: bool, submit):
    """Shared POST handling for new/edit. Returns a response on successful save, else None."""
    action = (request.form.get('action') or 'save').strip()
    draft = _draft_from_form(form)

    if action != 'save':
        _apply_action(action, form, draft)
        _bind_items(form, draft)
        return draft, None

    if not form.validate():
        if form.items.errors:
            flash(_('Check the prices of the order lines'), 'danger')
        _bind_items(form, draft)
        return draft, None
    if len(draft) == 0:
        flash(_('Add at least one item'), 'danger')
        _bind_items(form, draft)
        return draft, None
    try:
        payload = _order_payload(form, draft, catalog, for_update)
    except ValueError as e:
        flash(str(e), 'danger')
        _bind_items(form, draft)
        return draft, None
    try:
        return draft, submit(payload)
    except BackendError as e:
        flash_backend_error(e, _('Failed to update order') if for_update else _('Failed to create order'))
        _bind_items(form, draft)
        return draft, None


@bp.route('', methods=['GET'], endpoint='orders')
def orders():
    rows = load_or_flash(cache_helpers.get_orders, _('Failed to load orders'), default=[])
    q = (request.args.get('q') or '').strip()
    if q:
        needle = q.lower()
        rows = [o for o in rows if needle in (o.get('customerName') or '').lower()]
    catalog = _load_catalog()[1]
    return render_template('orders/list.html', orders=rows, q=q, catalog=catalog)


@bp.route('/new', methods=['GET', 'POST'], endpoint='new_order')
def new_order():
    products, catalog = _load_catalog()
    form = OrderForm()
    draft = OrderDraft()
    if request.method == 'POST':
        def _create(payload):
            created = cache_helpers.create_order(payload)
            flash(_('Order created'), 'success')
            return redirect(url_for('orders.order_detail', order_id=created['id']))

        draft, response = _editor(form, catalog, for_update=False, submit=_create)
        if response is not None:
            return response
    return render_template('orders/new.html', form=form, draft=draft, products=products,
                           catalog=catalog, total=draft.total(catalog))


@bp.route('/<int:order_id>', methods=['GET', 'POST'], endpoint='order_detail')
def order_detail(order_id: int):
    order = _load_order(order_id)
    products, catalog = _load_catalog()
    if request.method == 'POST':
        form = OrderForm()

        def _update(payload):
            cache_helpers.update_order(order_id, payload)
            flash(_('Order updated'), 'success')
            return redirect(url_for('orders.order_detail', order_id=order_id))

        draft, response = _editor(form, catalog, for_update=True, submit=_update)
        if response is not None:
            return response
    else:
        pickup = to_local(order.get('pickupDate'), _tz())
        form = OrderForm(
            formdata=None,
            customer_name=order.get('customerName') or '',
            pickup_date=pickup.replace(tzinfo=None) if pickup else None,
            notes=order.get('notes') or '',
        )
        draft = OrderDraft.from_order(order)
        _bind_items(form, draft)
    return render_template('orders/detail.html', form=form, order=order, draft=draft,
                           products=products, catalog=catalog, total=draft.total(catalog),
                           action_form=ConfirmForm())


@bp.route('/<int:order_id>/delete', methods=['GET', 'POST'], endpoint='delete_order')
def delete_order(order_id: int):
    order = _load_order(order_id)
    form = ConfirmForm()
    if form.validate_on_submit():
        try:
            cache_helpers.delete_order(order_id)
        except BackendError as e:
            flash_backend_error(e, _('Failed to delete order'))
            return redirect(url_for('orders.order_detail', order_id=order_id))
        flash(_('Order deleted'), 'success')
        return redirect(url_for('orders.orders'))
    return render_template('confirm_delete.html', form=form,
                           title=_('Delete order?'),
                           subject=f"#{order.get('id', order_id)} {order.get('customerName') or ''}".strip(),
                           cancel_url=url_for('orders.order_detail', order_id=order_id))


@bp.route('/<int:order_id>/print', methods=['POST'], endpoint='print_order')
def print_order(order_id: int):
    form = ConfirmForm()
    if not form.validate_on_submit():
        abort(400)
    try:
        result = cache_helpers.print_order(order_id) or {}
    except BackendError as e:
        flash_backend_error(e, _('Failed to print order'))
    else:
        if result.get('printed'):
            flash(_('Sent to printer (%(device)s)', device=result.get('devicePath') or '-'), 'success')
        else:
            flash(_('Printer did not print the order'), 'warning')
    return redirect(url_for('orders.order_detail', order_id=order_id))


@bp.route('/<int:order_id>/receipt', methods=['GET'], endpoint='receipt')
def receipt(order_id: int):
    order = _load_order(order_id)
    catalog = _load_catalog()[1]
    return render_template('orders/receipt.html', order=order, catalog=catalog)


@bp.route('/calendar', methods=['GET'], endpoint='calendar')
def calendar():
    today = local_now(_tz()).date()
    year, month = resolve_month(request.args.get('year'), request.args.get('month'), today)
    rows = load_or_flash(cache_helpers.get_orders, _('Failed to load orders'), default=[])
    catalog = _load_catalog()[1]
    month_view = build_month(rows, year, month, _tz(), today=today)
    return render_template('orders/calendar.html', cal=month_view, catalog=catalog)
