from fastapi import APIRouter, Body, Depends
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from models.payment import PaymentFormRequest
from services.payment_flow import PaymentFlow
from api.dependencies import NAMESPACE, get_client_ip, get_payment_flow

router = APIRouter(prefix=NAMESPACE)


@router.post("/customer", tags=["customer"])
def create_customer(
    payload: PaymentFormRequest = Body(..., description="Payment form submission"),
    client_ip: str = Depends(get_client_ip),
    flow: PaymentFlow = Depends(get_payment_flow),
):
    """Create a Customer from a payment form, or update it when object_id is sent."""
    envelope = flow.create_customer(payload, client_ip)
    return JSONResponse(status_code=envelope.status_code, content=jsonable_encoder(envelope.payload))
