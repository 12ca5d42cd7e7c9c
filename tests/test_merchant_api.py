"""Merchant profile: signup, settings, auth."""
from solders.keypair import Keypair

from conftest import make_token, add_merchant, MERCHANT_ID


def _profile(**overrides):
    body = {
        "business_name": "Coffee Corner",
        "wallet_address": str(Keypair().pubkey()),
        "preferred_token": "usdc",
        "network": "devnet",
    }
    body.update(overrides)
    return body


def test_requires_token(client):
    r = client.get("/api/merchants/me")
    assert r.status_code == 401
    assert r.json()["success"] is False


def test_rejects_token_with_wrong_secret(client):
    r = client.get("/api/merchants/me", headers={"Authorization": f"Bearer {make_token(secret='nope')}"})
    assert r.status_code == 401


def test_rejects_wrong_audience(client):
    token = make_token(aud="anon")
    r = client.get("/api/merchants/me", headers={"Authorization": f"Bearer {token}"})
    assert r.status_code == 401


def test_profile_not_created_yet(client, auth_headers):
    r = client.get("/api/merchants/me", headers=auth_headers)
    assert r.status_code == 404


def test_create_and_get_profile(client, auth_headers):
    body = _profile()
    r = client.post("/api/merchants/me", json=body, headers=auth_headers)
    assert r.status_code == 201
    data = r.json()["data"]
    assert data["id"] == MERCHANT_ID
    assert data["preferred_token"] == "USDC"

    r = client.get("/api/merchants/me", headers=auth_headers)
    assert r.status_code == 200
    assert r.json()["data"]["wallet_address"] == body["wallet_address"]


def test_create_twice_conflicts(client, auth_headers):
    assert client.post("/api/merchants/me", json=_profile(), headers=auth_headers).status_code == 201
    r = client.post("/api/merchants/me", json=_profile(), headers=auth_headers)
    assert r.status_code == 409


def test_create_validation(client, auth_headers):
    assert client.post("/api/merchants/me", json=_profile(wallet_address="abc"), headers=auth_headers).status_code == 422
    assert client.post("/api/merchants/me", json=_profile(preferred_token="DOGE"), headers=auth_headers).status_code == 422
    assert client.post("/api/merchants/me", json=_profile(network="testnet"), headers=auth_headers).status_code == 422
    r = client.post("/api/merchants/me", json=_profile(business_name="x"), headers=auth_headers)
    assert r.status_code == 422
    assert r.json()["data"]["errors"][0]["field"] == "body.business_name"


def test_update_settings(client, db, auth_headers):
    add_merchant(db)
    wallet = str(Keypair().pubkey())

    r = client.put(
        "/api/merchants/me",
        json={"preferred_token": "ray", "wallet_address": wallet, "network": "mainnet"},
        headers=auth_headers,
    )
    assert r.status_code == 200
    j = r.json()
    assert j["message"] == "Your settings have been updated successfully."
    assert j["data"]["preferred_token"] == "RAY"
    assert j["data"]["wallet_address"] == wallet
    assert j["data"]["network"] == "mainnet"
    assert j["data"]["business_name"] == "Coffee Corner"


def test_update_missing_profile(client, auth_headers):
    r = client.put("/api/merchants/me", json={"business_name": "New Name"}, headers=auth_headers)
    assert r.status_code == 404
