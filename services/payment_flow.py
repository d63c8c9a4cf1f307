"""Customer and PaymentIntent requests from a payment form.

Each request runs gate -> normalize -> build args -> Stripe call and every
stage either hands a value to the next or returns a Failure, which becomes
a 400 ``{message}`` response. Nothing raised inside a flow escapes it.
"""
from typing import Any, Callable, Dict, Union
import copy
import logging
import stripe
from models.payment import PaymentFormRequest, RequestEnvelope, ResponseEnvelope, Failure
from managers import hook_manager as hooks
from managers.hook_manager import HookManager
from managers.nonce_manager import NonceManager, CUSTOMER_NONCE_LIFE, customer_nonce_action
from managers.stripe_manager import StripeManager, handle_exception_message, to_plain_dict
from repository.form import FormRepository
from services.permissions import PermissionGate, CUSTOMER_CHECKS, PAYMENTINTENT_CHECKS
from services import normalizer
from services import payment_args

logger = logging.getLogger(__name__)


class PaymentFlow:

    def __init__(self, gate: PermissionGate, forms: FormRepository, gateway: StripeManager,
                 hook_manager: HookManager, nonces: NonceManager):
        self.gate = gate
        self.forms = forms
        self.gateway = gateway
        self.hooks = hook_manager
        self.nonces = nonces

    def _run(self, name: str, step: Callable[[], ResponseEnvelope]) -> ResponseEnvelope:
        try:
            return step()
        except Exception:
            logger.exception(f"{name} failed unexpectedly")
            return ResponseEnvelope.failure(Failure(kind='internal_error', message="Unable to complete payment."))

    def _call_gateway(self, call: Callable[[], Any]) -> Union[Dict[str, Any], Failure]:
        """Run a Stripe call and hand back its result as plain dicts."""
        try:
            return to_plain_dict(call())
        except stripe.StripeError as e:
            logger.info(f"Stripe request failed: {e.__class__.__name__} {e.code or ''}")
            return Failure(kind='processor_error', message=handle_exception_message(e))

    def _fail(self, failure: Failure) -> ResponseEnvelope:
        logger.info(f"Payment form request rejected: {failure.kind} {failure.field or ''}")
        return ResponseEnvelope.failure(failure)

    def create_customer(self, payload: PaymentFormRequest, client_ip: str) -> ResponseEnvelope:
        return self._run("Customer request", lambda: self._create_customer(payload, client_ip))

    def create_payment_intent(self, payload: PaymentFormRequest, client_ip: str) -> ResponseEnvelope:
        return self._run("PaymentIntent request", lambda: self._create_payment_intent(payload, client_ip))

    def confirm_payment_intent(self, payload: PaymentFormRequest, client_ip: str) -> ResponseEnvelope:
        return self._run("PaymentIntent confirmation", lambda: self._confirm_payment_intent(payload, client_ip))

    def _create_customer(self, payload: PaymentFormRequest, client_ip: str) -> ResponseEnvelope:
        failure = self.gate.evaluate(CUSTOMER_CHECKS, payload, client_ip)
        if failure:
            return self._fail(failure)

        envelope = normalizer.normalize_customer_request(payload, self.forms)
        if isinstance(envelope, Failure):
            return self._fail(envelope)
        form, form_data, form_values = envelope.form, envelope.form_data, envelope.form_values

        self.hooks.do_action(hooks.PRE_PROCESS_FORM, form, form_data, form_values)

        customer_args = payment_args.build_customer_args(envelope)
        self.hooks.do_action(hooks.BEFORE_CUSTOMER, customer_args, form, form_data, form_values)

        request_args = form.get_api_request_args()
        if envelope.object_id is None:
            customer = self._call_gateway(lambda: self.gateway.create_customer(customer_args, request_args))
            if isinstance(customer, Failure):
                return self._fail(customer)
            nonce = self.nonces.create_nonce(customer_nonce_action(customer["id"]), life=CUSTOMER_NONCE_LIFE)
        else:
            customer = self._call_gateway(
                lambda: self.gateway.update_customer(envelope.object_id, customer_args, request_args)
            )
            if isinstance(customer, Failure):
                return self._fail(customer)
            nonce = ''

        response = ResponseEnvelope.success({"customer": customer, "nonce": nonce})
        self.hooks.notify(hooks.AFTER_CUSTOMER, copy.deepcopy(customer), form, form_data, form_values)
        return response

    def _create_payment_intent(self, payload: PaymentFormRequest, client_ip: str) -> ResponseEnvelope:
        failure = self.gate.evaluate(PAYMENTINTENT_CHECKS, payload, client_ip)
        if failure:
            return self._fail(failure)

        envelope = normalizer.normalize_paymentintent_request(payload, self.forms)
        if isinstance(envelope, Failure):
            return self._fail(envelope)
        form, form_data, form_values = envelope.form, envelope.form_data, envelope.form_values
        customer_id = envelope.customer_id

        self.hooks.do_action(hooks.PROCESS_FORM, form, form_data, form_values, customer_id)

        paymentintent_args = payment_args.build_paymentintent_args(envelope)
        if isinstance(paymentintent_args, Failure):
            return self._fail(paymentintent_args)

        self.hooks.do_action(hooks.BEFORE_PAYMENTINTENT, paymentintent_args, form, form_data, form_values, customer_id)

        paymentintent = self._call_gateway(
            lambda: self.gateway.create_payment_intent(paymentintent_args, form.get_api_request_args())
        )
        if isinstance(paymentintent, Failure):
            return self._fail(paymentintent)

        self.hooks.notify(hooks.AFTER_PAYMENTINTENT, copy.deepcopy(paymentintent), form, form_data, form_values, customer_id)
        return self._payment_response(paymentintent, envelope)

    def _confirm_payment_intent(self, payload: PaymentFormRequest, client_ip: str) -> ResponseEnvelope:
        failure = self.gate.evaluate(PAYMENTINTENT_CHECKS, payload, client_ip)
        if failure:
            return self._fail(failure)

        envelope = normalizer.normalize_confirm_request(payload, self.forms)
        if isinstance(envelope, Failure):
            return self._fail(envelope)

        paymentintent = self._call_gateway(
            lambda: self.gateway.confirm_payment_intent(envelope.payment_intent_id, envelope.form.get_api_request_args())
        )
        if isinstance(paymentintent, Failure):
            return self._fail(paymentintent)

        return self._payment_response(paymentintent, envelope)

    def _payment_response(self, paymentintent: Dict[str, Any], envelope: RequestEnvelope) -> ResponseEnvelope:
        response = ResponseEnvelope.success(paymentintent)
        self.hooks.notify(
            hooks.AFTER_PAYMENTINTENT_RESPONSE,
            copy.deepcopy(paymentintent),
            envelope.form,
            envelope.form_data,
            envelope.form_values,
            envelope.customer_id,
        )
        return response
