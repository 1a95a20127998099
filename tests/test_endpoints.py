"""
HTTP-level tests: routing, authentication and the response envelope.
"""

from datetime import date, timedelta

import pytest

from test_fixtures import api_client, auth_headers, db_override, seed_demo, session_factory

API = "/api/v1"


@pytest.fixture
def demo(session_factory):
    db = session_factory()
    try:
        yield seed_demo(db)
    finally:
        db.close()


def _add(api_client, demo, merchant_id, food_id, quantity=1, replace_cart=False):
    return api_client.post(
        f"{API}/cart/items",
        json={
            "merchant_id": str(merchant_id),
            "food_id": str(food_id),
            "quantity": quantity,
            "replace_cart": replace_cart,
        },
        headers=auth_headers(demo.tokens),
    )


def test_health_check(api_client):
    r = api_client.get(f"{API}/health-check")
    assert r.status_code == 200
    body = r.json()
    assert body["result"] == "SUCCESS"
    assert body["data"]["service"] == "MealBudget"
    assert body["error"] is None
    assert "X-Request-ID" in r.headers


def test_cart_requires_bearer_token(api_client, demo):
    r = api_client.get(f"{API}/cart")
    assert r.status_code == 401
    body = r.json()
    assert body["result"] == "ERROR"
    assert body["error"]["code"] == "UNAUTHORIZED"

    r2 = api_client.get(f"{API}/cart", headers={"Authorization": "Bearer nope"})
    assert r2.status_code == 401


def test_merchant_catalog(api_client, demo):
    r = api_client.get(f"{API}/merchants")
    assert r.status_code == 200
    names = [m["name"] for m in r.json()["data"]]
    assert names == ["Corner Bistro", "Noodle House"]

    menu = api_client.get(f"{API}/merchants/{demo.bistro_id}/foods").json()["data"]
    assert {f["name"]: f["price"] for f in menu}["Bibimbap"] == 9500


def test_cart_add_conflict_and_replace(api_client, demo):
    """
    Verifies:
    - Add answers 201 with the line and cart total
    - Another merchant's food answers 409 CONFLICT with both names
    - replace_cart=true swaps the cart over
    """
    r = _add(api_client, demo, demo.bistro_id, demo.bibimbap_id, quantity=2)
    assert r.status_code == 201
    assert r.json()["data"]["cart_total_amount"] == 19000

    conflict = _add(api_client, demo, demo.noodle_id, demo.ramen_id)
    assert conflict.status_code == 409
    error = conflict.json()["error"]
    assert error["code"] == "CONFLICT"
    assert error["data"]["current_merchant_name"] == "Corner Bistro"
    assert error["data"]["requested_merchant_name"] == "Noodle House"

    cart = api_client.get(f"{API}/cart", headers=auth_headers(demo.tokens)).json()["data"]
    assert cart["merchant_name"] == "Corner Bistro"

    replaced = _add(api_client, demo, demo.noodle_id, demo.ramen_id, replace_cart=True)
    assert replaced.status_code == 201
    assert replaced.json()["data"]["replaced_cart"] is True

    cart = api_client.get(f"{API}/cart", headers=auth_headers(demo.tokens)).json()["data"]
    assert cart["merchant_name"] == "Noodle House"
    assert cart["total_amount"] == 8500


def test_cart_item_update_remove_and_clear(api_client, demo):
    headers = auth_headers(demo.tokens)
    item_id = _add(api_client, demo, demo.bistro_id, demo.stew_id).json()["data"]["cart_item_id"]
    _add(api_client, demo, demo.bistro_id, demo.rice_id)

    r = api_client.put(f"{API}/cart/items/{item_id}", json={"quantity": 3}, headers=headers)
    assert r.status_code == 200
    assert r.json()["data"]["cart_total_amount"] == 28000

    r = api_client.put(f"{API}/cart/items/{item_id}", json={"quantity": 0}, headers=headers)
    assert r.json()["data"]["removed"] is True

    r = api_client.delete(f"{API}/cart/items/{item_id}", headers=headers)
    assert r.status_code == 404
    assert r.json()["error"]["code"] == "NOT_FOUND"

    r = api_client.delete(f"{API}/cart", headers=headers)
    assert r.json()["data"]["removed_count"] == 1
    r = api_client.delete(f"{API}/cart", headers=headers)
    assert r.status_code == 200
    assert r.json()["data"]["removed_count"] == 0


def test_request_validation_uses_envelope(api_client, demo):
    r = _add(api_client, demo, demo.bistro_id, demo.rice_id, quantity=0)
    assert r.status_code == 422
    body = r.json()
    assert body["result"] == "ERROR"
    assert body["error"]["code"] == "VALIDATION"


def test_checkout_flow(api_client, demo):
    """
    Verifies:
    - Empty cart checkout answers 400 EMPTY_CART
    - A real checkout answers 201 with the budget summary
    - The expenditure shows up in history and the cart is empty
    """
    headers = auth_headers(demo.tokens)
    today = date.today()
    payload = {
        "meal_type": "LUNCH",
        "occurred_date": today.isoformat(),
        "occurred_time": "12:30:00",
    }

    r = api_client.post(f"{API}/cart/checkout", json=payload, headers=headers)
    assert r.status_code == 400
    assert r.json()["error"]["code"] == "EMPTY_CART"

    _add(api_client, demo, demo.bistro_id, demo.bibimbap_id)
    _add(api_client, demo, demo.bistro_id, demo.stew_id)

    r = api_client.post(f"{API}/cart/checkout", json=payload, headers=headers)
    assert r.status_code == 201
    data = r.json()["data"]
    assert data["final_amount"] == 18500
    assert data["budget_summary"]["meal_spent"] == 18500

    cart = api_client.get(f"{API}/cart", headers=headers).json()["data"]
    assert cart["items"] == []
    assert cart["merchant_id"] is None

    history = api_client.get(f"{API}/expenditures", headers=headers).json()["data"]
    assert len(history) == 1
    detail = api_client.get(
        f"{API}/expenditures/{data['expenditure_id']}", headers=headers
    ).json()["data"]
    assert detail["merchant_name"] == "Corner Bistro"
    assert len(detail["items"]) == 2

    dinners = api_client.get(
        f"{API}/expenditures", params={"meal_type": "DINNER"}, headers=headers
    ).json()["data"]
    assert dinners == []


def test_checkout_future_date_is_validation_error(api_client, demo):
    _add(api_client, demo, demo.bistro_id, demo.rice_id)
    tomorrow = date.today() + timedelta(days=1)
    r = api_client.post(
        f"{API}/cart/checkout",
        json={
            "meal_type": "DINNER",
            "occurred_date": tomorrow.isoformat(),
            "occurred_time": "19:00:00",
        },
        headers=auth_headers(demo.tokens),
    )
    assert r.status_code == 400
    assert r.json()["error"]["code"] == "VALIDATION"


def test_budget_endpoints(api_client, demo):
    """
    Verifies:
    - Absent daily and monthly budgets answer 404
    - Monthly upsert derives the daily total
    - Daily PUT upserts and bulk POST reports created/updated counts
    """
    headers = auth_headers(demo.tokens)
    today = date.today()

    r = api_client.get(f"{API}/budgets/daily", params={"date": today.isoformat()}, headers=headers)
    assert r.status_code == 404
    assert r.json()["error"]["code"] == "NOT_FOUND"
    assert api_client.get(f"{API}/budgets/monthly", headers=headers).status_code == 404

    r = api_client.put(f"{API}/budgets/monthly", json={"monthly_total": 300000}, headers=headers)
    assert r.status_code == 200
    assert r.json()["data"]["daily_total"] == 10000

    r = api_client.put(
        f"{API}/budgets/monthly/meals",
        json={"meal_budgets": {"LUNCH": 5000}},
        headers=headers,
    )
    assert r.json()["data"]["meal_budgets"]["LUNCH"] == 5000

    r = api_client.put(
        f"{API}/budgets/daily/{today.isoformat()}",
        json={"daily_total": 12000},
        headers=headers,
    )
    assert r.status_code == 200
    assert r.json()["data"]["affected_dates_count"] == 1

    snapshot = api_client.get(
        f"{API}/budgets/daily", params={"date": today.isoformat()}, headers=headers
    ).json()["data"]
    assert snapshot["daily_total"] == 12000
    lunch = next(m for m in snapshot["meal_budgets"] if m["meal_type"] == "LUNCH")
    assert lunch["budget"] == 5000

    r = api_client.post(
        f"{API}/budgets/daily/bulk",
        json={
            "start_date": today.isoformat(),
            "end_date": (today + timedelta(days=2)).isoformat(),
            "daily_total": 9000,
        },
        headers=headers,
    )
    assert r.json()["data"]["created_count"] == 2
    assert r.json()["data"]["updated_count"] == 1


def test_refresh_rotates_tokens(api_client, demo):
    r = api_client.post(f"{API}/auth/refresh", json={"refresh_token": demo.tokens.refresh_token})
    assert r.status_code == 200
    new_tokens = r.json()["data"]
    assert new_tokens["access_token"] != demo.tokens.access_token

    r = api_client.get(
        f"{API}/cart", headers={"Authorization": f"Bearer {new_tokens['access_token']}"}
    )
    assert r.status_code == 200

    # old pair is revoked
    assert api_client.get(f"{API}/cart", headers=auth_headers(demo.tokens)).status_code == 401
    r = api_client.post(f"{API}/auth/refresh", json={"refresh_token": demo.tokens.refresh_token})
    assert r.status_code == 401


def test_logout_revokes_tokens(api_client, demo):
    headers = auth_headers(demo.tokens)
    r = api_client.post(f"{API}/auth/logout", headers=headers)
    assert r.status_code == 200
    assert r.json()["data"]["revoked_count"] == 1
    assert api_client.get(f"{API}/cart", headers=headers).status_code == 401
