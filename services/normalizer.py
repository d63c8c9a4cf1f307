from typing import Any, Dict, Optional, Union
from models.payment import PaymentFormRequest, RequestEnvelope, Failure
from repository.form import FormRepository
import json

FORM_NOT_FOUND = "Unable to locate payment form."


def reject_legacy_source(payload: PaymentFormRequest) -> Optional[Failure]:
    """A PaymentMethod and a legacy Source can never be sent together."""
    if payload.payment_method_id is not None and payload.source_id is not None:
        return Failure(kind='malformed_payload', message="Unable to complete payment.")
    return None


def parse_form_data(form_data: Union[str, Dict[str, Any], None]) -> Union[Dict[str, Any], Failure]:
    if form_data is None or form_data == '':
        return {}
    if isinstance(form_data, dict):
        return form_data
    try:
        decoded = json.loads(form_data)
    except ValueError:
        return Failure(kind='malformed_payload', field='form_data', message="Unable to read payment form data.")
    if not isinstance(decoded, dict):
        return Failure(kind='malformed_payload', field='form_data', message="Unable to read payment form data.")
    return decoded


def _normalize(payload: PaymentFormRequest, forms: FormRepository, *required: str) -> Union[RequestEnvelope, Failure]:
    failure = reject_legacy_source(payload)
    if failure:
        return failure

    if payload.form_id is None or payload.form_id == '':
        return Failure(kind='missing_field', field='form_id', message=FORM_NOT_FOUND)

    messages = {
        'customer_id': "A customer must be provided.",
        'payment_intent_id': "Unable to locate PaymentIntent",
    }
    for field in required:
        if not getattr(payload, field):
            return Failure(kind='missing_field', field=field, message=messages[field])

    form_data = parse_form_data(payload.form_data)
    if isinstance(form_data, Failure):
        return form_data

    try:
        form_id = int(payload.form_id)
    except (TypeError, ValueError):
        return Failure(kind='form_not_found', field='form_id', message=FORM_NOT_FOUND)

    form = forms.get(form_id)
    if form is None:
        return Failure(kind='form_not_found', field='form_id', message=FORM_NOT_FOUND)

    return RequestEnvelope(
        form=form,
        form_data=form_data,
        form_values=payload.form_values or {},
        object_id=payload.object_id or None,
        customer_id=payload.customer_id,
        payment_intent_id=payload.payment_intent_id,
        payment_method_type=payload.payment_method_type or 'card',
        payment_method_id=payload.payment_method_id,
    )


def normalize_customer_request(payload: PaymentFormRequest, forms: FormRepository) -> Union[RequestEnvelope, Failure]:
    return _normalize(payload, forms)


def normalize_paymentintent_request(payload: PaymentFormRequest, forms: FormRepository) -> Union[RequestEnvelope, Failure]:
    return _normalize(payload, forms, 'customer_id')


def normalize_confirm_request(payload: PaymentFormRequest, forms: FormRepository) -> Union[RequestEnvelope, Failure]:
    return _normalize(payload, forms, 'payment_intent_id', 'customer_id')
