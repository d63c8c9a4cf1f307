from fastapi import Depends, Request
import os
from managers.hook_manager import HookManager, get_hook_manager
from managers.nonce_manager import NonceManager, get_nonce_manager
from managers.rate_limit_manager import RateLimitManager, get_rate_limiter
from managers.stripe_manager import StripeManager, get_stripe_manager
from repository.form import FormRepository, get_form_repository
from services.payment_flow import PaymentFlow
from services.permissions import PermissionGate, default_checks

NAMESPACE = "/wpsp/v2"


def get_client_ip(request: Request) -> str:
    """Address used to rate limit a request.

    X-Forwarded-For is only read behind SIMPAY_TRUSTED_PROXIES proxies, and then
    the right-most hop those proxies did not add is taken.
    """
    peer = request.client.host if request.client else "unknown"
    trusted = int(os.getenv("SIMPAY_TRUSTED_PROXIES", "0"))
    forwarded = request.headers.get("x-forwarded-for")
    if trusted <= 0 or not forwarded:
        return peer

    hops = [hop.strip() for hop in forwarded.split(",") if hop.strip()]
    hops.append(peer)
    return hops[max(len(hops) - 1 - trusted, 0)]


def get_payment_flow(
    forms: FormRepository = Depends(get_form_repository),
    gateway: StripeManager = Depends(get_stripe_manager),
    hook_manager: HookManager = Depends(get_hook_manager),
    nonces: NonceManager = Depends(get_nonce_manager),
    rate_limiter: RateLimitManager = Depends(get_rate_limiter),
) -> PaymentFlow:
    gate = PermissionGate(default_checks(rate_limiter, nonces, forms))
    return PaymentFlow(gate, forms, gateway, hook_manager, nonces)
