from __future__ import annotations

import pytest

from tests.test_utils import add_order_item, create_business, create_order, create_product


def _headers(user_id: str = "user-1") -> dict:
    return {"X-User-Id": user_id}


def test_root_ok(client):
    resp = client.get("/")

    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


def test_forecast_happy_path(client, db_session):
    business = create_business(db_session, name="API Shop")
    create_product(db_session, business, "P1", selling_price=50, product_name="Widget")
    create_product(db_session, business, "P2", selling_price=10, product_name="Gadget")
    create_order(db_session, business, "1", "2024-01-15")
    create_order(db_session, business, "2", "2024-02-10")
    add_order_item(db_session, business, "1", "P1", 100)
    add_order_item(db_session, business, "2", "P1", 150)
    add_order_item(db_session, business, "2", "P2", 200)

    resp = client.get(f"/api/v1/forecast/generate/{business.id}", headers=_headers())
    assert resp.status_code == 200, resp.text
    body = resp.json()

    assert body["success"] is True
    assert body["business"] == {"id": business.id, "name": "API Shop"}
    assert body["skipped_lines"] == 0
    assert body["forecast"] == [
        {
            "product_id": "P2",
            "product_name": "Gadget",
            "demand_forecast_units": 20,
            "confidence_score": 0.95,
        },
        {
            "product_id": "P1",
            "product_name": "Widget",
            "demand_forecast_units": 2,
            "confidence_score": 0.85,
        },
    ]


def test_forecast_empty_history(client, owned_business):
    resp = client.get(f"/api/v1/forecast/generate/{owned_business.id}", headers=_headers())

    assert resp.status_code == 200, resp.text
    assert resp.json()["forecast"] == []


def test_forecast_custom_alpha(client, db_session):
    business = create_business(db_session, name="Alpha Shop")
    create_product(db_session, business, "P1", selling_price=1)
    create_order(db_session, business, "1", "2024-01-01")
    create_order(db_session, business, "2", "2024-02-01")
    add_order_item(db_session, business, "1", "P1", 2)
    add_order_item(db_session, business, "2", "P1", 3)

    resp = client.get(
        f"/api/v1/forecast/generate/{business.id}",
        params={"alpha": 0.5},
        headers=_headers(),
    )

    assert resp.status_code == 200, resp.text
    assert resp.json()["forecast"][0]["demand_forecast_units"] == 3


def test_forecast_default_alpha_from_env(client, db_session, monkeypatch):
    business = create_business(db_session, name="Env Shop")
    create_product(db_session, business, "P1", selling_price=1)
    create_order(db_session, business, "1", "2024-01-01")
    create_order(db_session, business, "2", "2024-02-01")
    add_order_item(db_session, business, "1", "P1", 2)
    add_order_item(db_session, business, "2", "P1", 3)
    monkeypatch.setenv("FORECAST_SMOOTHING_ALPHA", "0.5")

    resp = client.get(f"/api/v1/forecast/generate/{business.id}", headers=_headers())

    assert resp.status_code == 200, resp.text
    assert resp.json()["forecast"][0]["demand_forecast_units"] == 3


@pytest.mark.parametrize("alpha", [0, 1, -0.2, 1.5])
def test_forecast_rejects_out_of_range_alpha(client, db_session, alpha):
    business = create_business(db_session, name="Bad Alpha Shop")

    resp = client.get(
        f"/api/v1/forecast/generate/{business.id}",
        params={"alpha": alpha},
        headers=_headers(),
    )

    assert resp.status_code == 422


def test_forecast_requires_user_identity(client, db_session):
    business = create_business(db_session, name="Anon Shop")

    resp = client.get(f"/api/v1/forecast/generate/{business.id}")

    assert resp.status_code == 401
    assert resp.json()["detail"] == "Missing user identity"


def test_forecast_for_foreign_business_is_forbidden(client, db_session):
    business = create_business(db_session, name="Private Shop", user_id="owner")

    resp = client.get(f"/api/v1/forecast/generate/{business.id}", headers=_headers("someone-else"))

    assert resp.status_code == 403
    assert resp.json()["detail"] == "Access denied or business not found"


def test_forecast_store_failure_is_reported(client, db_session, monkeypatch):
    from app.core.errors import ForecastDataError
    from app.services import demand_forecast

    business = create_business(db_session, name="Down Shop")

    def _boom(db, business_id):
        raise ForecastDataError("Failed to load sales order items")

    monkeypatch.setattr(demand_forecast, "load_order_lines", _boom)

    resp = client.get(f"/api/v1/forecast/generate/{business.id}", headers=_headers())

    assert resp.status_code == 500
    assert resp.json()["detail"] == "Failed to load sales order items"


def test_forecast_counts_spreadsheet_style_dates(client, db_session, owned_business):
    create_product(db_session, owned_business, "P1", selling_price=10, product_name="Widget")
    create_order(db_session, owned_business, "1", "01/15/2024")
    create_order(db_session, owned_business, "2", "February 3, 2024")
    add_order_item(db_session, owned_business, "1", "P1", 20)
    add_order_item(db_session, owned_business, "2", "P1", 30)

    resp = client.get(f"/api/v1/forecast/generate/{owned_business.id}", headers=_headers())

    assert resp.status_code == 200, resp.text
    body = resp.json()
    assert body["skipped_lines"] == 0
    assert body["forecast"][0]["demand_forecast_units"] == 2
    assert body["forecast"][0]["confidence_score"] == 0.85
