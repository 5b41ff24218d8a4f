"""Integration tests for category budget endpoints"""

from datetime import date

import pytest
from fastapi.testclient import TestClient

pytestmark = pytest.mark.integration


@pytest.fixture
def card(adult, make_card):
    return make_card(adult)


@pytest.fixture
def create_budget(client: TestClient, auth):
    def _create(user, category="Groceries", limit_amount_cents=10_000, **extra):
        response = client.post(
            "/v1/category-budgets",
            json={"category": category, "limit_amount_cents": limit_amount_cents, **extra},
            headers=auth(user),
        )
        assert response.status_code == 201, response.text
        return response.json()

    return _create


def test_create_budget_defaults(adult, create_budget):
    budget = create_budget(adult)

    assert budget["period"] == "monthly"
    assert budget["warning_threshold"] == 0.85
    assert budget["is_active"] is True


def test_duplicate_category_and_period_conflicts(client: TestClient, adult, create_budget, auth):
    create_budget(adult)

    response = client.post(
        "/v1/category-budgets", json={"category": "Groceries", "limit_amount_cents": 5_000}, headers=auth(adult)
    )
    assert response.status_code == 409

    # Same category on a different period is a different budget
    create_budget(adult, period="cycle")


def test_duplicate_check_ignores_category_case(client: TestClient, adult, create_budget, auth):
    create_budget(adult, category="Groceries")

    response = client.post(
        "/v1/category-budgets", json={"category": " groceries ", "limit_amount_cents": 5_000}, headers=auth(adult)
    )
    assert response.status_code == 409

    dining = create_budget(adult, category="Dining")
    renamed = client.patch(
        f"/v1/category-budgets/{dining['id']}", json={"category": "GROCERIES"}, headers=auth(adult)
    )
    assert renamed.status_code == 409


@pytest.mark.parametrize(
    "payload,field",
    [
        ({"category": "Dining", "limit_amount_cents": 0}, "limit_amount_cents"),
        ({"category": "Dining", "limit_amount_cents": 100, "warning_threshold": 1.5}, "warning_threshold"),
        ({"category": "Dining", "limit_amount_cents": 100, "period": "weekly"}, "period"),
        ({"category": " ", "limit_amount_cents": 100}, "category"),
        (
            {
                "category": "Dining",
                "limit_amount_cents": 100,
                "period_start_date": "2025-03-10",
                "period_end_date": "2025-03-01",
            },
            "period_end_date",
        ),
    ],
)
def test_create_budget_validation(client: TestClient, adult, auth, payload, field):
    response = client.post("/v1/category-budgets", json=payload, headers=auth(adult))

    assert response.status_code == 400
    assert response.json()["field"] == field


def test_summaries_report_status(client: TestClient, adult, card, create_budget, make_transaction, auth):
    create_budget(adult, category="Groceries")
    create_budget(adult, category="Dining")
    create_budget(adult, category="Fuel")

    make_transaction(adult, -8_500, date(2025, 3, 4), category="groceries", card=card)
    make_transaction(adult, -10_000, date(2025, 3, 5), category="Dining", card=card)
    make_transaction(adult, -2_000, date(2025, 3, 6), category="Fuel", card=card)
    make_transaction(adult, -9_000, date(2025, 3, 6), category="Fuel", card=card, is_pending=True)
    make_transaction(adult, -9_000, date(2025, 2, 27), category="Fuel", card=card)

    response = client.get("/v1/category-budgets/summaries?reference_date=2025-03-14", headers=auth(adult))

    assert response.status_code == 200
    by_category = {s["budget"]["category"]: s["evaluation"] for s in response.json()}
    assert by_category["Groceries"]["status"] == "warning"
    assert by_category["Groceries"]["spent_amount_cents"] == 8_500
    assert by_category["Dining"]["status"] == "over"
    assert by_category["Dining"]["remaining_amount_cents"] == 0
    assert by_category["Fuel"]["status"] == "ok"
    assert by_category["Fuel"]["spent_amount_cents"] == 2_000
    assert by_category["Fuel"]["period_start_date"] == "2025-03-01"
    assert by_category["Fuel"]["period_end_date"] == "2025-03-31"


def test_summaries_reject_bad_reference_date(client: TestClient, adult, auth):
    response = client.get("/v1/category-budgets/summaries?reference_date=14-03-2025", headers=auth(adult))

    assert response.status_code == 400
    assert response.json()["field"] == "reference_date"


def test_update_and_deactivate_budget(client: TestClient, adult, create_budget, auth):
    budget = create_budget(adult)
    url = f"/v1/category-budgets/{budget['id']}"

    updated = client.patch(url, json={"limit_amount_cents": 20_000, "warning_threshold": 0.5}, headers=auth(adult))
    assert updated.status_code == 200
    assert updated.json()["limit_amount_cents"] == 20_000
    assert updated.json()["warning_threshold"] == 0.5

    client.patch(url, json={"is_active": False}, headers=auth(adult))

    assert client.get("/v1/category-budgets", headers=auth(adult)).json() == []
    assert len(client.get("/v1/category-budgets?include_inactive=true", headers=auth(adult)).json()) == 1


def test_update_into_existing_key_conflicts(client: TestClient, adult, create_budget, auth):
    create_budget(adult, category="Groceries")
    dining = create_budget(adult, category="Dining")

    response = client.patch(f"/v1/category-budgets/{dining['id']}", json={"category": "Groceries"}, headers=auth(adult))

    assert response.status_code == 409


def test_delete_budget(client: TestClient, adult, make_user, create_budget, auth):
    budget = create_budget(adult)
    url = f"/v1/category-budgets/{budget['id']}"

    assert client.delete(url, headers=auth(make_user())).status_code == 404
    assert client.delete(url, headers=auth(adult)).status_code == 204
    assert client.delete(url, headers=auth(adult)).status_code == 404


def test_admin_lists_budgets_for_user(client: TestClient, adult, admin, create_budget, auth):
    create_budget(adult)

    response = client.get(f"/v1/category-budgets?user_id={adult.id}", headers=auth(admin))

    assert response.status_code == 200
    assert [b["category"] for b in response.json()] == ["Groceries"]

    forbidden = client.get(f"/v1/category-budgets?user_id={admin.id}", headers=auth(adult))
    assert forbidden.status_code == 403


def test_summaries_match_padded_transaction_categories(
    client: TestClient, adult, card, create_budget, make_transaction, auth
):
    create_budget(adult, category="Groceries")
    make_transaction(adult, -3_000, date(2025, 3, 4), category=" Groceries ", card=card)
    make_transaction(adult, -1_000, date(2025, 3, 5), category="GROCERIES", card=card)

    response = client.get("/v1/category-budgets/summaries?reference_date=2025-03-14", headers=auth(adult))

    assert response.status_code == 200
    assert response.json()[0]["evaluation"]["spent_amount_cents"] == 4_000
