"""Daily analytics rows."""
from datetime import date, timedelta
from decimal import Decimal

from conftest import add_merchant
from models.analytics import TransactionAnalytics


def _seed(db, merchant, days_ago):
    for offset in days_ago:
        db.add(TransactionAnalytics(
            merchant_id=merchant.id,
            date=date.today() - timedelta(days=offset),
            total_transactions=offset + 2,
            successful_transactions=offset + 1,
            total_volume=Decimal("12.50"),
        ))
    db.commit()


def test_default_range_is_last_30_days(client, db, auth_headers):
    _seed(db, add_merchant(db), [40, 5, 1])

    r = client.get("/api/analytics", headers=auth_headers)
    assert r.status_code == 200
    data = r.json()["data"]
    assert data["date_to"] == date.today().isoformat()
    rows = data["rows"]
    assert [row["date"] for row in rows] == [
        (date.today() - timedelta(days=5)).isoformat(),
        (date.today() - timedelta(days=1)).isoformat(),
    ]
    assert rows[0]["total_volume"] == "12.50"
    assert rows[0]["successful_transactions"] == 6


def test_explicit_range(client, db, auth_headers):
    _seed(db, add_merchant(db), [40, 35, 5])
    params = {
        "date_from": (date.today() - timedelta(days=45)).isoformat(),
        "date_to": (date.today() - timedelta(days=30)).isoformat(),
    }
    rows = client.get("/api/analytics", params=params, headers=auth_headers).json()["data"]["rows"]
    assert len(rows) == 2


def test_inverted_range(client, auth_headers):
    params = {"date_from": "2024-02-01", "date_to": "2024-01-01"}
    assert client.get("/api/analytics", params=params, headers=auth_headers).status_code == 400
