# models/payment.py
from pydantic import BaseModel
from typing import Optional, Dict, Any, Literal, Union
from models.form import FormDefinition

ErrorKind = Literal[
    'authorization_failed',
    'missing_field',
    'form_not_found',
    'malformed_payload',
    'invalid_amount',
    'missing_payment_method',
    'processor_error',
    'internal_error',
]


class PaymentFormRequest(BaseModel):
    """Body posted by a payment form. Everything is optional on the wire."""
    form_id: Optional[Union[int, str]] = None
    form_data: Optional[Union[str, Dict[str, Any]]] = None  # client formData, usually JSON encoded
    form_values: Optional[Dict[str, Any]] = None  # values of named fields
    form_nonce: Optional[str] = None
    customer_nonce: Optional[str] = None
    object_id: Optional[str] = None  # existing Customer to update
    customer_id: Optional[str] = None
    payment_intent_id: Optional[str] = None
    payment_method_type: Optional[str] = None
    payment_method_id: Optional[str] = None
    source_id: Optional[str] = None  # legacy Sources flow


class Failure(BaseModel):
    kind: ErrorKind
    message: str
    field: Optional[str] = None


class RequestEnvelope(BaseModel):
    form: FormDefinition
    form_data: Dict[str, Any] = {}
    form_values: Dict[str, Any] = {}
    object_id: Optional[str] = None
    customer_id: Optional[str] = None
    payment_intent_id: Optional[str] = None
    payment_method_type: str = 'card'
    payment_method_id: Optional[str] = None


class ResponseEnvelope(BaseModel):
    status_code: int = 200
    payload: Dict[str, Any]

    @classmethod
    def success(cls, payload: Dict[str, Any]) -> "ResponseEnvelope":
        return cls(status_code=200, payload=payload)

    @classmethod
    def failure(cls, failure: Failure) -> "ResponseEnvelope":
        return cls(status_code=400, payload={"message": failure.message})
