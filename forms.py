from flask_babel import lazy_gettext as _l
from flask_wtf import FlaskForm
from flask_wtf.file import FileAllowed, FileField, FileSize
from wtforms import DateTimeLocalField, FieldList, FormField, HiddenField, StringField, SubmitField, TextAreaField
from wtforms.validators import DataRequired, Length, Optional, ValidationError

from utils.format import parse_formatted_number

IMAGE_EXTENSIONS = ['png', 'jpg', 'jpeg', 'gif', 'webp']
IMAGE_MAX_BYTES = 10 * 1024 * 1024


def integer_price(form, field):
    """Accept formatted input such as ``Rp 12.500``; the digits must form an integer."""
    if not parse_formatted_number(field.data):
        raise ValidationError(_l('Price must be an integer'))


def optional_integer_price(form, field):
    if (field.data or '').strip() and not parse_formatted_number(field.data):
        raise ValidationError(_l('Price must be an integer'))


class ProductForm(FlaskForm):
    name = StringField(_l('Name'), validators=[DataRequired(), Length(max=200)])
    description = TextAreaField(_l('Description'), validators=[Optional(), Length(max=2000)])
    price = StringField(_l('Price (IDR)'), validators=[DataRequired(), integer_price],
                        render_kw={'inputmode': 'numeric', 'data-format': 'idr'})
    image = FileField(_l('Image (optional)'), validators=[
        FileAllowed(IMAGE_EXTENSIONS, _l('Only image files are allowed')),
        FileSize(max_size=IMAGE_MAX_BYTES, message=_l('Image must be 10 MB or smaller')),
    ])
    submit = SubmitField(_l('Save'))


class OrderItemForm(FlaskForm):
    class Meta:
        csrf = False  # disable CSRF for nested subform
    item_type = HiddenField(default='product')
    product_id = HiddenField()
    amount = StringField(_l('Qty'), render_kw={'inputmode': 'numeric'})
    price_at_sale = StringField(_l('Price at sale'), validators=[optional_integer_price],
                                render_kw={'inputmode': 'numeric'})
    custom_name = HiddenField()
    custom_price = HiddenField()
    notes = StringField(_l('Notes'), validators=[Optional(), Length(max=500)])


class OrderForm(FlaskForm):
    customer_name = StringField(_l('Customer name'), validators=[DataRequired(), Length(max=200)])
    pickup_date = DateTimeLocalField(_l('Pickup date (optional)'), format='%Y-%m-%dT%H:%M',
                                     validators=[Optional()])
    notes = TextAreaField(_l('Notes'), validators=[Optional(), Length(max=2000)])
    items = FieldList(FormField(OrderItemForm), min_entries=0)

    # "Add custom item" box; read only by the add_custom action
    custom_name = StringField(_l('Custom item'), validators=[Optional(), Length(max=200)])
    custom_price = StringField(_l('Custom price (IDR)'), validators=[Optional(), optional_integer_price],
                               render_kw={'inputmode': 'numeric', 'data-format': 'idr'})
    custom_notes = StringField(_l('Custom item notes'), validators=[Optional(), Length(max=500)])

    submit = SubmitField(_l('Save'))


class BackendUrlForm(FlaskForm):
    url = StringField(_l('Backend URL'), validators=[DataRequired()],
                      render_kw={'placeholder': 'http://localhost:3000'})
    test = SubmitField(_l('Test Connection'))
    save = SubmitField(_l('Save'))


class ConfirmForm(FlaskForm):
    """Bare form for confirm-and-POST actions (delete, print, retry)."""
    submit = SubmitField(_l('Confirm'))
