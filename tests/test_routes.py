from datetime import date, datetime

import pytest
from pydantic import ValidationError

from app.core.config import settings
from app.schemas.goal import GoalUpdate
from app.schemas.investment import InvestmentSnapshotCreate
from app.schemas.salary import SalaryCreate
from app.utils.aggregation import shift_month

API = "/api/v1"


def this_month(day: int = 1) -> str:
    today = datetime.utcnow().date()
    return date(today.year, today.month, day).isoformat()


def last_month(day: int = 1) -> str:
    today = datetime.utcnow().date()
    year, month = shift_month(today.year, today.month, -1)
    return date(year, month, day).isoformat()


@pytest.fixture
def act_as(current, make_account):
    """Create an account and make the API client act as it."""
    accounts = {}

    async def _act_as(email: str):
        if email not in accounts:
            accounts[email] = await make_account(email)
        current["account_id"] = accounts[email].id
        return accounts[email]
    return _act_as


async def test_salary_crud(client, act_as):
    await act_as("alice@example.com")

    response = await client.post(f"{API}/salaries", json={"amount": 3_000_000, "date": this_month(25)})
    assert response.status_code == 201
    salary = response.json()

    listed = await client.get(f"{API}/salaries")
    assert [s["id"] for s in listed.json()] == [salary["id"]]

    response = await client.patch(f"{API}/salaries/{salary['id']}", json={"amount": 3_200_000})
    assert response.status_code == 200
    assert response.json()["amount"] == 3_200_000

    response = await client.delete(f"{API}/salaries/{salary['id']}")
    assert response.status_code == 204
    assert (await client.get(f"{API}/salaries/{salary['id']}")).status_code == 404


async def test_negative_amount_is_rejected(client, act_as):
    await act_as("alice@example.com")

    response = await client.post(f"{API}/living-expenses", json={
        "amount": -1, "date": this_month(), "category": "생활비",
    })

    assert response.status_code == 422


@pytest.mark.parametrize("path, body", [
    ("/salaries", '{"amount": Infinity, "date": "%s"}'),
    ("/savings", '{"type": "SAVINGS", "amount": Infinity, "date": "%s"}'),
    ("/investments", '{"name": "ETF", "type": "stock", "amount": 100, "current_value": NaN, "date": "%s"}'),
])
async def test_non_finite_amounts_are_rejected(client, act_as, path, body):
    await act_as("alice@example.com")

    response = await client.post(
        f"{API}{path}",
        content=body % this_month(),
        headers={"Content-Type": "application/json"},
    )

    assert response.status_code == 422
    assert (await client.get(f"{API}{path}")).json() == []


async def test_non_finite_snapshot_is_rejected(client, act_as):
    await act_as("alice@example.com")

    response = await client.post(
        f"{API}/kis/snapshot",
        content='{"investment_amount": 100, "kis_total_value": Infinity}',
        headers={"Content-Type": "application/json"},
    )

    assert response.status_code == 422


@pytest.mark.parametrize("schema, fields", [
    (SalaryCreate, {"amount": float("inf"), "date": "2024-05-01"}),
    (GoalUpdate, {"current_amount": float("nan")}),
    (InvestmentSnapshotCreate, {"investment_amount": float("-inf")}),
])
def test_schemas_refuse_non_finite_values(schema, fields):
    with pytest.raises(ValidationError):
        schema(**fields)


async def test_records_are_private_to_the_household(client, act_as):
    await act_as("alice@example.com")
    salary = (await client.post(f"{API}/salaries", json={"amount": 100, "date": this_month()})).json()

    await act_as("stranger@example.com")

    assert (await client.get(f"{API}/salaries")).json() == []
    assert (await client.get(f"{API}/salaries/{salary['id']}")).status_code == 404
    assert (await client.patch(f"{API}/salaries/{salary['id']}", json={"amount": 1})).status_code == 404
    assert (await client.delete(f"{API}/salaries/{salary['id']}")).status_code == 404


async def test_invitation_flow_links_partners(client, act_as):
    await act_as("bob@example.com")
    await act_as("alice@example.com")
    await client.post(f"{API}/salaries", json={"amount": 3_000_000, "date": this_month()})

    response = await client.post(f"{API}/invitations", json={
        "invitee_email": "bob@example.com", "inviter_name": "Alice",
    })
    assert response.status_code == 201
    code = response.json()["code"]
    assert response.json()["status"] == "PENDING"

    await act_as("bob@example.com")
    received = (await client.get(f"{API}/invitations/received")).json()
    assert [i["code"] for i in received] == [code]

    response = await client.post(f"{API}/invitations/{code}/accept", json={"name": "Bob", "character": "bear"})
    assert response.status_code == 200
    bob = response.json()
    assert bob["type"] == "PARTNER_2"
    assert bob["partner_id"] is not None

    household = (await client.get(f"{API}/users/me")).json()
    assert household["partner"]["name"] == "Alice"
    assert household["partner"]["type"] == "PARTNER_1"

    # Bob now sees Alice's records
    salaries = (await client.get(f"{API}/salaries")).json()
    assert [s["amount"] for s in salaries] == [3_000_000]

    assert (await client.get(f"{API}/invitations/{code}")).status_code == 404


async def test_invitation_for_someone_else_is_forbidden(client, act_as):
    await act_as("alice@example.com")
    code = (await client.post(f"{API}/invitations", json={"invitee_email": "bob@example.com"})).json()["code"]

    await act_as("mallory@example.com")
    response = await client.post(f"{API}/invitations/{code}/accept", json={"name": "Mallory"})

    assert response.status_code == 403
    assert (await client.get(f"{API}/invitations/{code}")).json()["status"] == "PENDING"


async def test_rejecting_someone_elses_invitation_is_forbidden(client, act_as):
    await act_as("alice@example.com")
    code = (await client.post(f"{API}/invitations", json={"invitee_email": "bob@example.com"})).json()["code"]

    await act_as("mallory@example.com")
    response = await client.post(f"{API}/invitations/{code}/reject")

    assert response.status_code == 403
    assert (await client.get(f"{API}/invitations/{code}")).json()["status"] == "PENDING"


async def test_self_invitation_is_rejected(client, act_as):
    await act_as("alice@example.com")

    response = await client.post(f"{API}/invitations", json={"invitee_email": "alice@example.com"})

    assert response.status_code == 400


async def test_unlink_partner(client, act_as):
    await act_as("bob@example.com")
    await act_as("alice@example.com")
    code = (await client.post(f"{API}/invitations", json={"invitee_email": "bob@example.com"})).json()["code"]
    await act_as("bob@example.com")
    await client.post(f"{API}/invitations/{code}/accept", json={"name": "Bob"})

    response = await client.delete(f"{API}/users/me/partner")
    assert response.status_code == 200
    assert response.json()["partner_id"] is None

    await act_as("alice@example.com")
    assert (await client.get(f"{API}/users/me")).json()["partner"] is None
    assert (await client.delete(f"{API}/users/me/partner")).status_code == 400


async def test_profile_update_requires_fields(client, act_as):
    await act_as("alice@example.com")

    assert (await client.patch(f"{API}/users/me", json={})).status_code == 400
    response = await client.patch(f"{API}/users/me", json={"name": "Alice", "character": " cat "})
    assert response.json()["name"] == "Alice"
    assert response.json()["character"] == "cat"


def test_deposits_count_as_expense_by_default():
    assert settings.COUNT_DEPOSITS_AS_EXPENSE is True


async def test_dashboard_summary(client, act_as):
    await act_as("alice@example.com")
    await client.post(f"{API}/salaries", json={"amount": 3_000_000, "date": this_month(1)})
    await client.post(f"{API}/fixed-expenses", json={"name": "Rent", "amount": 500_000, "day_of_month": 1})
    await client.post(f"{API}/living-expenses", json={"amount": 300_000, "date": this_month(1), "category": "생활비"})
    await client.post(f"{API}/living-expenses", json={"amount": 70_000, "date": this_month(1), "category": "외식"})
    await client.post(f"{API}/allowances", json={"amount": 100_000, "date": this_month(1)})
    await client.post(f"{API}/savings", json={"amount": 1_000_000, "date": last_month(1)})
    await client.post(f"{API}/investments", json={
        "name": "ETF", "type": "stock", "amount": 2_000_000, "date": last_month(1),
    })

    response = await client.get(f"{API}/dashboard/summary")
    assert response.status_code == 200
    body = response.json()

    current = body["current"]
    assert current["total_income"] == 3_000_000
    assert current["total_expense"] == 900_000
    assert current["cash_balance"] == 2_100_000
    assert current["total_assets"] == 5_100_000
    assert body["holdings_connected"] is False

    # Last month only had the deposits, which also count as its expense
    previous = body["previous"]
    assert previous["total_expense"] == 500_000 + 3_000_000
    assert body["change"]["previous_assets"] == previous["total_assets"]
    assert [m["month"] for m in body["history"]][-1] == current["month"]


async def test_dashboard_requires_year_and_month_together(client, act_as):
    await act_as("alice@example.com")

    assert (await client.get(f"{API}/dashboard/summary", params={"year": 2024})).status_code == 400


async def test_past_month_summary_without_snapshot_uses_local_value(client, act_as):
    await act_as("alice@example.com")
    await client.post(f"{API}/salaries", json={"amount": 1_000, "date": "2024-05-25"})
    await client.post(f"{API}/investments", json={
        "name": "ETF", "type": "stock", "amount": 2_000, "date": "2024-05-02",
    })

    body = (await client.get(f"{API}/dashboard/summary", params={"year": 2024, "month": 5})).json()
    assert body["current"]["month"] == "2024-05"
    assert body["current"]["total_investment"] == 2_000


async def test_kis_connection_rejects_bad_account_number(client, act_as):
    await act_as("alice@example.com")

    response = await client.put(f"{API}/kis/connection", json={
        "app_key": "key", "app_secret": "secret", "account_number": "1234567-01",
    })

    assert response.status_code == 400


async def test_kis_holdings_feed_the_dashboard(client, act_as):
    await act_as("alice@example.com")
    await client.post(f"{API}/salaries", json={"amount": 1_000_000, "date": this_month()})
    await client.post(f"{API}/investments", json={
        "name": "ETF", "type": "stock", "amount": 400_000, "date": this_month(),
    })

    response = await client.put(f"{API}/kis/connection", json={
        "app_key": "key", "app_secret": "secret", "account_number": "12345678-01", "is_virtual": True,
    })
    assert response.status_code == 200
    assert "app_secret" not in response.json()

    token = (await client.post(f"{API}/kis/token")).json()
    assert token["expires_in"] > 0
    assert "access_token" not in token

    holdings = (await client.get(f"{API}/kis/holdings")).json()
    assert holdings["total_value"] == 1_000_000
    assert [h["stock_code"] for h in holdings["holdings"]] == ["005930", "000660"]

    body = (await client.get(f"{API}/dashboard/summary")).json()
    assert body["holdings_connected"] is True
    assert body["holdings_total"] == 1_000_000
    assert body["current"]["total_investment"] == 1_000_000


async def test_kis_endpoints_require_connection(client, act_as):
    await act_as("alice@example.com")

    assert (await client.get(f"{API}/kis/holdings")).status_code == 404
    assert (await client.get(f"{API}/kis/connection")).status_code == 404


async def test_kis_broker_failure_maps_to_bad_gateway(client, act_as, kis_routes):
    await act_as("alice@example.com")
    await client.put(f"{API}/kis/connection", json={
        "app_key": "key", "app_secret": "secret", "account_number": "12345678-01",
    })
    kis_routes.pop("/uapi/domestic-stock/v1/trading/inquire-balance")

    response = await client.get(f"{API}/kis/holdings")

    assert response.status_code == 502


async def test_ledger_owner_filters(client, act_as):
    await act_as("alice@example.com")
    me = (await client.get(f"{API}/users/me")).json()["user"]
    await client.post(f"{API}/ledger", json={
        "type": "INCOME", "amount": 50_000, "date": this_month(), "category": "SIDE_INCOME", "user_id": me["id"],
    })
    await client.post(f"{API}/ledger", json={
        "type": "EXPENSE", "amount": 20_000, "date": this_month(), "category": "GIFT",
    })

    personal = (await client.get(f"{API}/ledger", params={"owner_id": me["id"]})).json()
    joint = (await client.get(f"{API}/ledger", params={"joint_only": True})).json()

    assert [t["category"] for t in personal] == ["SIDE_INCOME"]
    assert [t["category"] for t in joint] == ["GIFT"]


async def test_goal_progress_route(client, act_as):
    await act_as("alice@example.com")
    goal = (await client.post(f"{API}/goals", json={
        "title": "Wedding", "target_amount": 4_000_000, "current_amount": 1_000_000,
    })).json()

    progress = (await client.get(f"{API}/goals/{goal['id']}/progress")).json()

    assert progress["progress_percentage"] == 25.0
    assert progress["remaining_amount"] == 3_000_000
    assert progress["status"] == "In Progress"
