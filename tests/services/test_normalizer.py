import pytest
from conftest import InMemoryFormRepository
from models.payment import PaymentFormRequest, RequestEnvelope, Failure
from services import normalizer


@pytest.fixture
def forms(form):
    return InMemoryFormRepository([form])


def test_normalize_customer_request(forms):
    envelope = normalizer.normalize_customer_request(PaymentFormRequest(
        form_id="7", form_data='{"customAmount": 100}', form_values={"a": "b"}, object_id=""
    ), forms)
    assert isinstance(envelope, RequestEnvelope)
    assert envelope.form.id == 7
    assert envelope.form_data == {"customAmount": 100}
    assert envelope.form_values == {"a": "b"}
    assert envelope.object_id is None
    assert envelope.payment_method_type == "card"


def test_legacy_source_checked_first(forms):
    failure = normalizer.normalize_paymentintent_request(PaymentFormRequest(payment_method_id="pm_1", source_id="src_1"), forms)
    assert failure == Failure(kind="malformed_payload", message="Unable to complete payment.")
    assert forms.lookups == []


def test_missing_form_id(forms):
    failure = normalizer.normalize_confirm_request(PaymentFormRequest(), forms)
    assert failure.kind == "missing_field"
    assert failure.message == "Unable to locate payment form."


@pytest.mark.parametrize("form_id", [8, "abc"])
def test_form_not_found(forms, form_id):
    failure = normalizer.normalize_customer_request(PaymentFormRequest(form_id=form_id), forms)
    assert failure.kind == "form_not_found"
    assert failure.message == "Unable to locate payment form."


@pytest.mark.parametrize("form_data", ["{broken", "[1, 2]", "42"])
def test_malformed_form_data(forms, form_data):
    failure = normalizer.normalize_customer_request(PaymentFormRequest(form_id=7, form_data=form_data), forms)
    assert failure.kind == "malformed_payload"
    assert forms.lookups == []


def test_decoded_form_data_accepted(forms):
    envelope = normalizer.normalize_customer_request(PaymentFormRequest(form_id=7, form_data={"x": 1}), forms)
    assert envelope.form_data == {"x": 1}


def test_confirm_requires_ids(forms):
    failure = normalizer.normalize_confirm_request(PaymentFormRequest(form_id=7, customer_id="cus_1"), forms)
    assert failure.field == "payment_intent_id"
    failure = normalizer.normalize_confirm_request(PaymentFormRequest(form_id=7, payment_intent_id="pi_1"), forms)
    assert failure.message == "A customer must be provided."
