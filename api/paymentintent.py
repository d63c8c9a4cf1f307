from fastapi import APIRouter, Body, Depends
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from models.payment import PaymentFormRequest
from services.payment_flow import PaymentFlow
from api.dependencies import NAMESPACE, get_client_ip, get_payment_flow

router = APIRouter(prefix=f"{NAMESPACE}/paymentintent")


@router.post("/create", tags=["paymentintent"])
def create_payment_intent(
    payload: PaymentFormRequest = Body(..., description="Payment form submission"),
    client_ip: str = Depends(get_client_ip),
    flow: PaymentFlow = Depends(get_payment_flow),
):
    """Create a PaymentIntent for a Customer made by the same form."""
    envelope = flow.create_payment_intent(payload, client_ip)
    return JSONResponse(status_code=envelope.status_code, content=jsonable_encoder(envelope.payload))


@router.post("/confirm", tags=["paymentintent"])
def confirm_payment_intent(
    payload: PaymentFormRequest = Body(..., description="Payment form submission"),
    client_ip: str = Depends(get_client_ip),
    flow: PaymentFlow = Depends(get_payment_flow),
):
    """Confirm a PaymentIntent, e.g. after a 3D Secure challenge."""
    envelope = flow.confirm_payment_intent(payload, client_ip)
    return JSONResponse(status_code=envelope.status_code, content=jsonable_encoder(envelope.payload))
