from typing import Optional
from datetime import datetime, timezone, timedelta
import os
import jwt
import logging

logger = logging.getLogger(__name__)

FORM_NONCE_ACTION = "payment_form"
CUSTOMER_NONCE_LIFE = 120  # seconds


def customer_nonce_action(customer_id: str) -> str:
    return f"payment_form_customer_{customer_id}"


class NonceManager:
    """Short-lived tokens proving a request follows a legitimate prior step.

    A nonce is an HS256 JWT bound to an action name; it verifies only for
    that action and until it expires.
    """

    algorithm = "HS256"

    def __init__(self, secret: Optional[str] = None, default_life: Optional[int] = None):
        self.secret = secret or os.getenv("SIMPAY_NONCE_SECRET")
        if not self.secret:
            raise ValueError("SIMPAY_NONCE_SECRET is not set")
        self.default_life = default_life or int(os.getenv("SIMPAY_NONCE_LIFE", "86400"))

    def create_nonce(self, action: str, life: Optional[int] = None) -> str:
        now = datetime.now(timezone.utc)
        payload = {
            "act": action,
            "iat": now,
            "exp": now + timedelta(seconds=life or self.default_life),
        }
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def verify_nonce(self, nonce: Optional[str], action: str) -> bool:
        if not nonce:
            return False
        try:
            payload = jwt.decode(nonce, self.secret, algorithms=[self.algorithm], options={"require": ["exp", "act"]})
        except jwt.exceptions.InvalidTokenError as e:
            logger.info(f"Nonce rejected for {action}: {e}")
            return False
        return payload.get("act") == action


def get_nonce_manager() -> NonceManager:
    return NonceManager()
