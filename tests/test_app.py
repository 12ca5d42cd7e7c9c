"""App wiring: health, CORS and the error envelope."""
from core.errors import AggregatorError, NotFound
from utilities.response import payment_error_response


def test_health(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json()["status"] == "healthy"


def test_cors_allows_vercel_deployments(client):
    r = client.options(
        "/api/pay/some-link",
        headers={"Origin": "https://solpay-git-main.vercel.app", "Access-Control-Request-Method": "GET"},
    )
    assert r.status_code == 200
    assert r.headers["access-control-allow-origin"] == "https://solpay-git-main.vercel.app"


def test_cors_rejects_unknown_origin(client):
    r = client.options(
        "/api/pay/some-link",
        headers={"Origin": "https://evil.example.com", "Access-Control-Request-Method": "GET"},
    )
    assert "access-control-allow-origin" not in r.headers


def test_payment_error_envelope():
    body = payment_error_response(AggregatorError(transfer_signature="5sig"))
    assert body == {
        "success": False,
        "message": "Failed to swap tokens. Please try again.",
        "data": {"error": "aggregator_error", "transfer_signature": "5sig"},
    }


def test_payment_error_envelope_without_transfer():
    body = payment_error_response(NotFound())
    assert body["data"] == {"error": "not_found", "transfer_signature": None}
