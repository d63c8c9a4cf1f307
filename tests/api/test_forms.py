import pytest
from api import app
from managers.auth_manager import get_current_user
from managers.nonce_manager import FORM_NONCE_ACTION


@pytest.fixture
def admin(client):
    app.dependency_overrides[get_current_user] = lambda: {"sub": "admin", "scp": "forms.write license.read"}
    yield client


def test_get_form(client, nonces):
    response = client.get("/wpsp/v2/forms/7")
    assert response.status_code == 200
    data = response.json()
    assert data["id"] == 7
    assert data["amount"] == 1500
    assert "stripe_account" not in data
    assert nonces.verify_nonce(data["form_nonce"], FORM_NONCE_ACTION)


def test_get_unknown_form(client):
    response = client.get("/wpsp/v2/forms/404")
    assert response.status_code == 404


def test_form_nonce_from_get_form_works_for_customer(client, gateway):
    nonce = client.get("/wpsp/v2/forms/7").json()["form_nonce"]
    response = client.post("/wpsp/v2/customer", json={
        "form_id": 7,
        "form_nonce": nonce,
        "form_values": {"simpay_email": "payer@example.com"},
    })
    assert response.status_code == 200


def test_put_form(admin, form_repository):
    response = admin.put("/wpsp/v2/forms/8", json={"id": 8, "title": "Tickets", "amount": 4200, "currency": "eur"})
    assert response.status_code == 200
    assert form_repository.forms[8].amount == 4200
    assert response.json()["updated_at"] is not None


def test_put_form_id_mismatch(admin):
    response = admin.put("/wpsp/v2/forms/8", json={"id": 9, "title": "Tickets"})
    assert response.status_code == 400


def test_put_form_requires_scope(client):
    app.dependency_overrides[get_current_user] = lambda: {"sub": "someone", "scp": "license.read"}
    response = client.put("/wpsp/v2/forms/8", json={"id": 8})
    assert response.status_code == 403


def test_put_form_requires_token(client):
    response = client.put("/wpsp/v2/forms/8", json={"id": 8})
    assert response.status_code in (401, 403)
