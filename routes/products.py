# Products blueprint: catalog list, create, edit, delete.
from __future__ import annotations

from flask import Blueprint, abort, flash, redirect, render_template, url_for
from flask_babel import gettext as _

from forms import ConfirmForm, ProductForm
from routes.common import backend_guard, flash_backend_error, load_or_flash
from services.backend_api import BackendError, BackendNotFoundError
from utils import cache_helpers
from utils.format import format_number, parse_formatted_number

bp = Blueprint('products', __name__, url_prefix='/products')


@bp.before_request
def _require_backend():
    return backend_guard()


def _product_payload(form: ProductForm, blank_description: str | None):
    """JSON body for create/update. ``blank_description`` is what an empty description becomes."""
    payload = {
        'name': form.name.data.strip(),
        'price': int(parse_formatted_number(form.price.data)),
    }
    description = (form.description.data or '')
    if description.strip():
        payload['description'] = description
    elif blank_description is not None:
        payload['description'] = blank_description
    return payload


def _uploaded_image(form: ProductForm):
    f = form.image.data
    if f is None or not getattr(f, 'filename', ''):
        return None
    return f


def _load_product(product_id: int):
    try:
        return cache_helpers.get_product(product_id)
    except BackendNotFoundError:
        abort(404)
    except BackendError as e:
        flash_backend_error(e, _('Failed to load product'))
        abort(redirect(url_for('products.products')))


@bp.route('', methods=['GET'], endpoint='products')
def products():
    rows = load_or_flash(cache_helpers.get_products, _('Failed to load products'), default=[])
    return render_template('products/list.html', products=rows)


@bp.route('/new', methods=['GET', 'POST'], endpoint='new_product')
def new_product():
    form = ProductForm()
    if form.validate_on_submit():
        try:
            created = cache_helpers.create_product(_product_payload(form, None),
                                                   image=_uploaded_image(form))
        except BackendError as e:
            flash_backend_error(e, _('Failed to create product'))
        else:
            flash(_('Product created'), 'success')
            return redirect(url_for('products.product_detail', product_id=created['id']))
    elif form.is_submitted():
        form.price.data = format_number(form.price.data)
    return render_template('products/new.html', form=form)


@bp.route('/<int:product_id>', methods=['GET', 'POST'], endpoint='product_detail')
def product_detail(product_id: int):
    product = _load_product(product_id)
    form = ProductForm()
    if form.validate_on_submit():
        try:
            product = cache_helpers.update_product(product_id, _product_payload(form, ''),
                                                   image=_uploaded_image(form))
        except BackendError as e:
            flash_backend_error(e, _('Failed to save product'))
        else:
            flash(_('Product saved'), 'success')
            return redirect(url_for('products.product_detail', product_id=product_id))
    elif not form.is_submitted():
        form.name.data = product.get('name') or ''
        form.description.data = product.get('description') or ''
        form.price.data = format_number(product.get('price'))
    return render_template('products/detail.html', form=form, product=product)


@bp.route('/<int:product_id>/delete', methods=['GET', 'POST'], endpoint='delete_product')
def delete_product(product_id: int):
    product = _load_product(product_id)
    form = ConfirmForm()
    if form.validate_on_submit():
        try:
            cache_helpers.delete_product(product_id)
        except BackendError as e:
            flash_backend_error(e, _('Failed to delete product'))
            return redirect(url_for('products.product_detail', product_id=product_id))
        flash(_('Product deleted'), 'success')
        return redirect(url_for('products.products'))
    return render_template('confirm_delete.html', form=form,
                           title=_('Delete product?'),
                           subject=product.get('name'),
                           cancel_url=url_for('products.products'))
