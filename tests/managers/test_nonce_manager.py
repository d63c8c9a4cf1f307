import pytest
from unittest.mock import patch
from datetime import datetime, timezone, timedelta
from managers.nonce_manager import NonceManager


def test_nonce_verifies_for_its_action(nonces):
    nonce = nonces.create_nonce("payment_form")
    assert nonces.verify_nonce(nonce, "payment_form")
    assert not nonces.verify_nonce(nonce, "payment_form_customer_cus_1")


def test_nonce_from_other_secret_rejected(nonces):
    other = NonceManager(secret="another-secret-0123456789abcdefgh")
    assert not nonces.verify_nonce(other.create_nonce("payment_form"), "payment_form")


@pytest.mark.parametrize("nonce", [None, "", "garbage"])
def test_invalid_nonces(nonces, nonce):
    assert not nonces.verify_nonce(nonce, "payment_form")


def test_expired_nonce(nonces):
    past = datetime.now(timezone.utc) - timedelta(minutes=5)
    with patch("managers.nonce_manager.datetime") as mock_datetime:
        mock_datetime.now.return_value = past
        nonce = nonces.create_nonce("payment_form", life=120)
    assert not nonces.verify_nonce(nonce, "payment_form")


def test_secret_required(monkeypatch):
    monkeypatch.delenv("SIMPAY_NONCE_SECRET", raising=False)
    with pytest.raises(ValueError):
        NonceManager()


def test_default_life_from_environment(monkeypatch):
    monkeypatch.setenv("SIMPAY_NONCE_LIFE", "600")
    assert NonceManager(secret="s" * 32).default_life == 600
