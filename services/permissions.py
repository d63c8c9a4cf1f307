from typing import Callable, Dict, Optional, Sequence
from models.payment import PaymentFormRequest, Failure
from managers.nonce_manager import NonceManager, FORM_NONCE_ACTION, customer_nonce_action
from managers.rate_limit_manager import RateLimitManager
from repository.form import FormRepository
import logging

logger = logging.getLogger(__name__)

PermissionCheck = Callable[[PaymentFormRequest, str], Optional[Failure]]

CUSTOMER_CHECKS = ('rate_limit', 'form_nonce', 'required_fields')
PAYMENTINTENT_CHECKS = ('rate_limit', 'form_nonce', 'customer_nonce')


def _denied(message: str) -> Failure:
    return Failure(kind='authorization_failed', message=message)


class PermissionGate:
    """Runs named checks in order and stops at the first one that fails."""

    def __init__(self, checks: Dict[str, PermissionCheck]):
        self.checks = checks

    def evaluate(self, names: Sequence[str], payload: PaymentFormRequest, client_ip: str) -> Optional[Failure]:
        for name in names:
            check = self.checks.get(name)
            if check is None:
                logger.error(f"Unknown permission check: {name}")
                return _denied("Invalid request. Please try again.")

            failure = check(payload, client_ip)
            if failure is not None:
                logger.info(f"Permission check {name} failed for {client_ip}")
                return failure
        return None


def default_checks(rate_limiter: RateLimitManager, nonces: NonceManager, forms: FormRepository) -> Dict[str, PermissionCheck]:

    def rate_limit(payload: PaymentFormRequest, client_ip: str) -> Optional[Failure]:
        if not rate_limiter.hit(client_ip):
            return _denied("Sorry, you have made too many requests. Please try again later.")
        return None

    def form_nonce(payload: PaymentFormRequest, client_ip: str) -> Optional[Failure]:
        if not nonces.verify_nonce(payload.form_nonce, FORM_NONCE_ACTION):
            return _denied("Invalid request. Please refresh the page and try again.")
        return None

    def customer_nonce(payload: PaymentFormRequest, client_ip: str) -> Optional[Failure]:
        if not payload.customer_id or not nonces.verify_nonce(
            payload.customer_nonce, customer_nonce_action(payload.customer_id)
        ):
            return _denied("Invalid request. Please refresh the page and try again.")
        return None

    def required_fields(payload: PaymentFormRequest, client_ip: str) -> Optional[Failure]:
        if payload.form_id is None:
            return None
        form = forms.get(payload.form_id)
        # An unknown form is reported later, while normalizing.
        if form is None:
            return None

        values = payload.form_values or {}
        for field in form.fields:
            if field.required and values.get(field.name) in (None, '', [], {}):
                return Failure(kind='authorization_failed', field=field.name,
                               message=f"Please complete all required fields: {field.label or field.name}.")
        return None

    return {
        'rate_limit': rate_limit,
        'form_nonce': form_nonce,
        'customer_nonce': customer_nonce,
        'required_fields': required_fields,
    }
