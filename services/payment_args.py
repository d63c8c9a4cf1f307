"""Maps a payment form and its submitted values to Stripe API arguments."""
from typing import Any, Dict, Union
from models.form import FormDefinition
from models.payment import RequestEnvelope, Failure

FORM_ID_METADATA_KEY = "simpay_form_id"
ADDRESS_KEYS = ('line1', 'line2', 'city', 'state', 'postal_code', 'country')
CARD = 'card'
SEPA_DEBIT = 'sepa_debit'


def _value(form: FormDefinition, form_values: Dict[str, Any], field_type: str) -> Any:
    field = form.get_field(field_type)
    if field is None:
        return None
    value = form_values.get(field.name)
    return value if value not in ('', None) else None


def get_custom_metadata(form: FormDefinition, form_values: Dict[str, Any]) -> Dict[str, str]:
    metadata: Dict[str, str] = {}
    for field in form.fields:
        if not field.metadata:
            continue
        value = form_values.get(field.name)
        if value in ('', None):
            continue
        if isinstance(value, (list, tuple)):
            value = ', '.join(str(v) for v in value)
        metadata[field.metadata_key] = str(value)[:500]
    return metadata


def get_customer_args(form: FormDefinition, form_data: Dict[str, Any], form_values: Dict[str, Any]) -> Dict[str, Any]:
    args: Dict[str, Any] = {}

    email = _value(form, form_values, 'email')
    if email:
        args['email'] = email

    name = _value(form, form_values, 'customer_name')
    if name:
        args['name'] = name

    phone = _value(form, form_values, 'telephone')
    if phone:
        args['phone'] = phone

    address = _value(form, form_values, 'billing_address')
    if isinstance(address, dict):
        address = {k: v for k, v in address.items() if k in ADDRESS_KEYS and v}
        if address:
            args['address'] = address

    metadata = get_custom_metadata(form, form_values)
    if metadata:
        args['metadata'] = metadata

    return args


def add_form_metadata(args: Dict[str, Any], form_id: int) -> Dict[str, Any]:
    """Tag args with the originating form without touching other metadata keys."""
    if not isinstance(args.get('metadata'), dict):
        args['metadata'] = {}
    args['metadata'][FORM_ID_METADATA_KEY] = form_id
    return args


def get_amount(form: FormDefinition, form_data: Dict[str, Any]) -> Union[int, Failure]:
    if not form.custom_amount:
        return form.amount

    custom_amount = form_data.get('customAmount')
    if custom_amount is None:
        return form.amount
    try:
        amount = int(custom_amount)
    except (TypeError, ValueError):
        return Failure(kind='invalid_amount', field='customAmount', message="Please enter a valid amount.")
    if amount < form.minimum_amount:
        return Failure(kind='invalid_amount', field='customAmount',
                       message=f"Please enter an amount equal to or greater than {form.minimum_amount}.")
    return amount


def get_paymentintent_args(form: FormDefinition, form_data: Dict[str, Any], form_values: Dict[str, Any],
                           customer_id: str) -> Union[Dict[str, Any], Failure]:
    amount = get_amount(form, form_data)
    if isinstance(amount, Failure):
        return amount

    args: Dict[str, Any] = {
        'amount': amount,
        'currency': form.currency,
    }
    if form.description:
        args['description'] = form.description
    if form.statement_descriptor:
        args['statement_descriptor_suffix'] = form.statement_descriptor[:22]

    email = _value(form, form_values, 'email')
    if email:
        args['receipt_email'] = email

    args['metadata'] = get_custom_metadata(form, form_values)
    return add_form_metadata(args, form.id)


def build_customer_args(envelope: RequestEnvelope) -> Dict[str, Any]:
    args = get_customer_args(envelope.form, envelope.form_data, envelope.form_values)
    return add_form_metadata(args, envelope.form.id)


def build_paymentintent_args(envelope: RequestEnvelope) -> Union[Dict[str, Any], Failure]:
    args = get_paymentintent_args(envelope.form, envelope.form_data, envelope.form_values, envelope.customer_id)
    if isinstance(args, Failure):
        return args

    args.update({
        'customer': envelope.customer_id,
        'expand': ['customer'],
        'payment_method_types': [envelope.payment_method_type],
    })

    if envelope.payment_method_type == CARD:
        if envelope.payment_method_id is None:
            return Failure(kind='missing_payment_method', field='payment_method_id',
                           message="A Payment Method is required.")
        args['payment_method'] = envelope.payment_method_id
    elif envelope.payment_method_type == SEPA_DEBIT:
        # Mandate reuse for later off-session debits.
        args['setup_future_usage'] = 'off_session'

    return args
