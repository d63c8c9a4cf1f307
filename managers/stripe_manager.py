from typing import Optional, Dict, Any
import stripe
import logging

logger = logging.getLogger(__name__)


class StripeManager:
    """Thin wrapper over the Stripe resource classes.

    Every call takes the form's request options (api_key, stripe_account) so
    forms in different modes or accounts never share a global key. Errors are
    raised as stripe.StripeError; nothing is retried here.
    """

    def create_customer(self, args: Dict[str, Any], request_args: Dict[str, Any]) -> stripe.Customer:
        customer = stripe.Customer.create(**args, **request_args)
        logger.info(f"Created customer {customer.id}")
        return customer

    def update_customer(self, customer_id: str, args: Dict[str, Any], request_args: Dict[str, Any]) -> stripe.Customer:
        customer = stripe.Customer.modify(customer_id, **args, **request_args)
        logger.info(f"Updated customer {customer.id}")
        return customer

    def create_payment_intent(self, args: Dict[str, Any], request_args: Dict[str, Any]) -> stripe.PaymentIntent:
        paymentintent = stripe.PaymentIntent.create(**args, **request_args)
        logger.info(f"Created PaymentIntent {paymentintent.id} ({paymentintent.status})")
        return paymentintent

    def confirm_payment_intent(self, paymentintent_id: str, request_args: Dict[str, Any],
                               args: Optional[Dict[str, Any]] = None) -> stripe.PaymentIntent:
        paymentintent = stripe.PaymentIntent.confirm(paymentintent_id, **(args or {}), **request_args)
        logger.info(f"Confirmed PaymentIntent {paymentintent.id} ({paymentintent.status})")
        return paymentintent


def to_plain_dict(obj: Any) -> Any:
    """Copy a Stripe object into plain dicts and lists, dropping its request options."""
    if isinstance(obj, stripe.StripeObject):
        obj = obj.to_dict()
    if isinstance(obj, dict):
        return {key: to_plain_dict(value) for key, value in obj.items()}
    if isinstance(obj, list):
        return [to_plain_dict(value) for value in obj]
    return obj


def handle_exception_message(e: Exception) -> str:
    """Human readable summary of a failure, safe to show to the payer."""
    if isinstance(e, stripe.StripeError):
        return e.user_message or "Unable to complete payment."
    return "Unable to complete payment."


def get_stripe_manager() -> StripeManager:
    return StripeManager()
