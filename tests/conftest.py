import os
import pytest
import stripe
from fastapi.testclient import TestClient
from typing import Any, Dict, List, Optional, Tuple
from api import app
from models.form import FormDefinition, FormField
from managers.hook_manager import HookManager, get_hook_manager
from managers.nonce_manager import NonceManager, FORM_NONCE_ACTION, CUSTOMER_NONCE_LIFE, customer_nonce_action, get_nonce_manager
from managers.rate_limit_manager import RateLimitManager, get_rate_limiter
from managers.stripe_manager import get_stripe_manager
from repository.form import get_form_repository

TEST_SETTINGS = {
    "SIMPAY_NONCE_SECRET": "test-nonce-secret-0123456789abcdef",
    "STRIPE_SECRET_KEY_TEST": "sk_test_123",
    "STRIPE_SECRET_KEY_LIVE": "sk_live_123",
    "SIMPAY_EDITION": "pro",
}
STRIPE_KEY = TEST_SETTINGS["STRIPE_SECRET_KEY_TEST"]


@pytest.fixture(scope="session", autouse=True)
def load_test_settings():
    for key, value in TEST_SETTINGS.items():
        os.environ[key] = value


class InMemoryFormRepository:
    def __init__(self, forms: Optional[List[FormDefinition]] = None):
        self.forms = {form.id: form for form in forms or []}
        self.lookups: List[Any] = []

    def get(self, form_id):
        self.lookups.append(form_id)
        try:
            return self.forms.get(int(form_id))
        except (TypeError, ValueError):
            return None

    def upsert(self, form: FormDefinition) -> FormDefinition:
        form.update_timestamp('upsert')
        self.forms[form.id] = form
        return form


class FakeStripeManager:
    """Records every call; answers with Stripe objects built from canned values."""

    def __init__(self):
        self.calls: List[Tuple[str, Dict[str, Any]]] = []
        self.error: Optional[Exception] = None

    def _record(self, name: str, **kwargs):
        self.calls.append((name, kwargs))
        if self.error is not None:
            raise self.error

    def create_customer(self, args, request_args):
        self._record("create_customer", args=args, request_args=request_args)
        return stripe.Customer.construct_from(
            {"id": "cus_new", "object": "customer", "metadata": dict(args.get("metadata", {}))}, STRIPE_KEY
        )

    def update_customer(self, customer_id, args, request_args):
        self._record("update_customer", customer_id=customer_id, args=args, request_args=request_args)
        return stripe.Customer.construct_from(
            {"id": customer_id, "object": "customer", "metadata": dict(args.get("metadata", {}))}, STRIPE_KEY
        )

    def create_payment_intent(self, args, request_args):
        self._record("create_payment_intent", args=args, request_args=request_args)
        return stripe.PaymentIntent.construct_from({
            "id": "pi_123",
            "object": "payment_intent",
            "status": "requires_confirmation",
            "amount": args["amount"],
            "customer": {"id": args["customer"], "object": "customer"},
        }, STRIPE_KEY)

    def confirm_payment_intent(self, paymentintent_id, request_args, args=None):
        self._record("confirm_payment_intent", paymentintent_id=paymentintent_id, request_args=request_args)
        return stripe.PaymentIntent.construct_from(
            {"id": paymentintent_id, "object": "payment_intent", "status": "succeeded"}, STRIPE_KEY
        )


def make_form(**overrides) -> FormDefinition:
    values = dict(
        id=7,
        title="Donation",
        description="One time donation",
        amount=1500,
        currency="usd",
        fields=[
            FormField(name="simpay_email", label="Email", type="email", required=True),
            FormField(name="simpay_customer_name", label="Name", type="customer_name"),
            FormField(name="simpay_field_tshirt", label="T-Shirt Size", type="dropdown", metadata=True),
        ],
    )
    values.update(overrides)
    return FormDefinition(**values)


@pytest.fixture
def form() -> FormDefinition:
    return make_form()


@pytest.fixture
def form_repository(form) -> InMemoryFormRepository:
    return InMemoryFormRepository([form])


@pytest.fixture
def gateway() -> FakeStripeManager:
    return FakeStripeManager()


@pytest.fixture
def nonces() -> NonceManager:
    return NonceManager(secret=TEST_SETTINGS["SIMPAY_NONCE_SECRET"])


@pytest.fixture
def form_nonce(nonces) -> str:
    return nonces.create_nonce(FORM_NONCE_ACTION)


@pytest.fixture
def customer_nonce(nonces):
    def make(customer_id: str) -> str:
        return nonces.create_nonce(customer_nonce_action(customer_id), life=CUSTOMER_NONCE_LIFE)
    return make


@pytest.fixture(autouse=True)
def hook_manager():
    manager = HookManager()
    manager.remove_all_actions()
    yield manager
    manager.remove_all_actions()


@pytest.fixture(autouse=True)
def rate_limiter():
    limiter = RateLimitManager()
    limiter.configure(max_requests=100, window=60)
    yield limiter
    limiter.reset()


@pytest.fixture
def client(form_repository, gateway, nonces, hook_manager, rate_limiter):
    app.dependency_overrides[get_form_repository] = lambda: form_repository
    app.dependency_overrides[get_stripe_manager] = lambda: gateway
    app.dependency_overrides[get_nonce_manager] = lambda: nonces
    app.dependency_overrides[get_hook_manager] = lambda: hook_manager
    app.dependency_overrides[get_rate_limiter] = lambda: rate_limiter
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def card_declined():
    return stripe.CardError("Your card was declined.", "card", "card_declined")
