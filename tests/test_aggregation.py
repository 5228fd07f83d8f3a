import uuid
from datetime import date

import pytest
from hypothesis import given, strategies as st

from app.models.allowance import Allowance
from app.models.fixed_expense import FixedExpense
from app.models.goal import Goal
from app.models.investment import Investment, InvestmentSnapshot
from app.models.ledger import LedgerTransaction, TransactionType
from app.models.living_expense import LivingExpense
from app.models.salary import Salary
from app.models.savings import Savings, SavingsType
from app.utils.aggregation import (
    HouseholdRecords,
    build_dashboard,
    change_percent,
    goal_progress,
    has_activity,
    month_end_investment,
    monthly_history,
    shift_month,
    summarize_month,
)

USER_A = uuid.uuid4()
USER_B = uuid.uuid4()


def sample_household() -> HouseholdRecords:
    return HouseholdRecords(
        salaries=[Salary(amount=3_000_000, date=date(2024, 5, 25))],
        fixed_expenses=[FixedExpense(name="Rent", amount=500_000, day_of_month=1)],
        living_expenses=[
            LivingExpense(amount=300_000, date=date(2024, 5, 10), category="생활비"),
            LivingExpense(amount=80_000, date=date(2024, 5, 11), category="외식"),
        ],
        allowances=[Allowance(amount=100_000, date=date(2024, 5, 3))],
        savings=[Savings(type=SavingsType.SAVINGS, amount=1_000_000, date=date(2024, 4, 20))],
        investments=[Investment(name="ETF", type="stock", amount=2_000_000, date=date(2024, 4, 15), created_by=USER_A)],
    )


def test_cash_balance_example():
    summary = summarize_month(sample_household(), 2024, 5)

    assert summary.month == "2024-05"
    assert summary.total_income == 3_000_000
    assert summary.total_expense == 900_000
    assert summary.cash_balance == 2_100_000


def test_total_assets_example():
    summary = summarize_month(sample_household(), 2024, 5)

    assert summary.total_savings == 1_000_000
    assert summary.total_investment == 2_000_000
    assert summary.total_assets == 5_100_000


def test_only_living_category_counts_as_expense():
    records = sample_household()
    records.living_expenses.append(
        LivingExpense(amount=50_000, date=date(2024, 5, 12), category="생활비")
    )

    assert summarize_month(records, 2024, 5).total_expense == 950_000


def test_ledger_entries_split_by_type():
    records = HouseholdRecords(ledger_transactions=[
        LedgerTransaction(type=TransactionType.INCOME, amount=200_000, date=date(2024, 5, 2), category="SIDE_INCOME"),
        LedgerTransaction(type=TransactionType.EXPENSE, amount=70_000, date=date(2024, 5, 9), category="GIFT"),
        LedgerTransaction(type=TransactionType.EXPENSE, amount=999, date=date(2024, 6, 1), category="GIFT"),
    ])

    summary = summarize_month(records, 2024, 5)
    assert summary.total_income == 200_000
    assert summary.total_expense == 70_000


def test_records_outside_month_are_ignored():
    records = sample_household()
    records.salaries.append(Salary(amount=3_100_000, date=date(2024, 6, 25)))

    assert summarize_month(records, 2024, 5).total_income == 3_000_000


def test_deposits_count_as_expense_when_enabled():
    records = sample_household()
    records.savings.append(Savings(type=SavingsType.TRAVEL_SAVINGS, amount=200_000, date=date(2024, 5, 5)))
    records.investments.append(Investment(name="Bond", type="bond", amount=300_000, date=date(2024, 5, 6)))

    without = summarize_month(records, 2024, 5)
    with_deposits = summarize_month(records, 2024, 5, include_deposits=True)

    assert without.total_expense == 900_000
    assert with_deposits.total_expense == 1_400_000
    # Deposits still count towards savings and investments
    assert with_deposits.total_savings == 1_200_000
    assert with_deposits.total_investment == 2_300_000


def test_current_value_preferred_over_principal():
    records = HouseholdRecords(investments=[
        Investment(name="ETF", type="stock", amount=1_000_000, current_value=1_250_000, date=date(2024, 1, 5)),
        Investment(name="Fund", type="fund", amount=500_000, current_value=None, date=date(2024, 2, 5)),
    ])

    assert summarize_month(records, 2024, 5).total_investment == 1_750_000


def test_holdings_total_replaces_local_investments():
    summary = summarize_month(sample_household(), 2024, 5, holdings_total=2_600_000)

    assert summary.total_investment == 2_600_000
    assert summary.total_assets == 2_100_000 + 1_000_000 + 2_600_000


def test_zero_holdings_total_falls_back_to_local():
    summary = summarize_month(sample_household(), 2024, 5, holdings_total=0)

    assert summary.total_investment == 2_000_000


def test_cumulative_totals_exclude_future_records():
    records = sample_household()
    records.savings.append(Savings(type=SavingsType.SAVINGS, amount=400_000, date=date(2024, 6, 1)))

    assert summarize_month(records, 2024, 5).total_savings == 1_000_000
    assert summarize_month(records, 2024, 6).total_savings == 1_400_000


@pytest.mark.parametrize(
    "current, previous, expected",
    [
        (100.0, 0.0, 0.0),
        (0.0, 0.0, 0.0),
        (110.0, 100.0, 10.0),
        (50.0, 100.0, -50.0),
        (-50.0, -100.0, 50.0),
    ],
)
def test_change_percent(current, previous, expected):
    assert change_percent(current, previous) == pytest.approx(expected)


def test_shift_month_crosses_year_boundary():
    assert shift_month(2024, 1, -1) == (2023, 12)
    assert shift_month(2024, 12, 1) == (2025, 1)
    assert shift_month(2024, 3, -5) == (2023, 10)


def test_month_end_investment_uses_latest_snapshot_before_month_end():
    snapshots = [
        InvestmentSnapshot(user_id=USER_A, snapshot_date=date(2024, 4, 10), investment_amount=1_000_000, kis_total_value=0),
        InvestmentSnapshot(user_id=USER_A, snapshot_date=date(2024, 4, 30), investment_amount=1_000_000, kis_total_value=1_300_000),
        InvestmentSnapshot(user_id=USER_A, snapshot_date=date(2024, 5, 2), investment_amount=9_999_999, kis_total_value=0),
    ]

    assert month_end_investment(snapshots, 2024, 4) == 1_300_000
    assert month_end_investment(snapshots, 2024, 3) is None


def test_month_end_investment_adds_up_household_members():
    snapshots = [
        InvestmentSnapshot(user_id=USER_A, snapshot_date=date(2024, 4, 28), investment_amount=700_000, kis_total_value=0),
        InvestmentSnapshot(user_id=USER_B, snapshot_date=date(2024, 4, 15), investment_amount=0, kis_total_value=500_000),
    ]

    assert month_end_investment(snapshots, 2024, 4) == 1_200_000


def test_month_end_investment_keeps_partner_without_snapshot():
    investments = [
        Investment(name="Fund", type="fund", amount=1_000_000, date=date(2024, 3, 1), created_by=USER_B),
        Investment(name="Later", type="fund", amount=5_000, date=date(2024, 6, 1), created_by=USER_B),
        Investment(name="ETF", type="stock", amount=300_000, date=date(2024, 3, 1), created_by=USER_A),
    ]
    snapshots = [
        InvestmentSnapshot(user_id=USER_A, snapshot_date=date(2024, 4, 30), investment_amount=0, kis_total_value=0),
    ]

    # A's own records are covered by A's snapshot; B has none, so B's local value is added
    assert month_end_investment(snapshots, 2024, 4, investments) == 1_000_000
    assert month_end_investment(snapshots, 2024, 3, investments) is None


def test_history_keeps_partner_investments_across_months():
    records = HouseholdRecords(
        salaries=[
            Salary(amount=100, date=date(2024, 3, 25)),
            Salary(amount=100, date=date(2024, 4, 25)),
            Salary(amount=100, date=date(2024, 5, 25)),
        ],
        investments=[
            Investment(name="Fund", type="fund", amount=1_000_000, date=date(2024, 3, 1), created_by=USER_B),
        ],
    )
    snapshots = [
        InvestmentSnapshot(user_id=USER_A, snapshot_date=date(2024, 4, 30), investment_amount=0, kis_total_value=0),
    ]

    history = monthly_history(records, snapshots, today=date(2024, 5, 20))

    assert {m.month: m.total_investment for m in history} == {
        "2024-03": 1_000_000,
        "2024-04": 1_000_000,
        "2024-05": 1_000_000,
    }


def test_has_activity_ignores_fixed_expenses():
    records = HouseholdRecords(fixed_expenses=[FixedExpense(name="Rent", amount=1, day_of_month=1)])

    assert not has_activity(records, 2024, 5)


def test_history_skips_months_without_activity():
    history = monthly_history(sample_household(), [], today=date(2024, 6, 15))

    assert [m.month for m in history] == ["2024-04", "2024-05"]


def test_history_values_past_months_from_snapshots():
    snapshots = [
        InvestmentSnapshot(user_id=USER_A, snapshot_date=date(2024, 4, 30), investment_amount=2_000_000, kis_total_value=2_400_000),
    ]

    history = monthly_history(sample_household(), snapshots, today=date(2024, 6, 15))
    by_month = {m.month: m for m in history}

    assert by_month["2024-04"].total_investment == 2_400_000
    # No snapshot inside May, so the April one is still the latest before May's end
    assert by_month["2024-05"].total_investment == 2_400_000


def test_history_current_month_uses_live_holdings():
    records = sample_household()
    records.salaries.append(Salary(amount=3_000_000, date=date(2024, 6, 25)))

    history = monthly_history(records, [], today=date(2024, 6, 15), holdings_total=3_000_000)

    assert history[-1].month == "2024-06"
    assert history[-1].total_investment == 3_000_000
    assert history[0].total_investment == 2_000_000


def test_dashboard_without_previous_activity_reports_zero_change():
    records = HouseholdRecords(salaries=[Salary(amount=1_000_000, date=date(2024, 5, 25))])

    dashboard = build_dashboard(records, [], today=date(2024, 5, 28))

    assert dashboard["previous"] is None
    assert dashboard["change"]["previous_assets"] == 0
    assert dashboard["change"]["percentage"] == 0
    assert dashboard["change"]["amount"] == 1_000_000


def test_dashboard_quiet_previous_month_carries_assets():
    records = HouseholdRecords(
        savings=[Savings(type=SavingsType.SAVINGS, amount=2_000_000, date=date(2024, 2, 10))],
        investments=[Investment(name="ETF", type="stock", amount=1_000_000, date=date(2024, 3, 1), created_by=USER_A)],
        salaries=[Salary(amount=500_000, date=date(2024, 5, 25))],
    )

    dashboard = build_dashboard(records, [], today=date(2024, 5, 28))

    # Nothing dated in April, but savings and investments carried over
    assert dashboard["previous"].month == "2024-04"
    assert dashboard["change"]["previous_assets"] == 3_000_000
    assert dashboard["change"]["amount"] == 500_000
    assert dashboard["change"]["percentage"] == pytest.approx(500_000 / 3_000_000 * 100)
    assert [m.month for m in dashboard["history"]] == ["2024-02", "2024-03", "2024-05"]


def test_dashboard_change_against_previous_month():
    records = HouseholdRecords(
        salaries=[
            Salary(amount=1_000_000, date=date(2024, 4, 25)),
            Salary(amount=1_500_000, date=date(2024, 5, 25)),
        ],
    )

    dashboard = build_dashboard(records, [], today=date(2024, 5, 28))

    assert dashboard["previous"].total_assets == 1_000_000
    assert dashboard["current"].total_assets == 1_500_000
    assert dashboard["change"]["amount"] == 500_000
    assert dashboard["change"]["percentage"] == pytest.approx(50.0)
    assert [m.month for m in dashboard["history"]] == ["2024-04", "2024-05"]


def test_goal_progress():
    goal = Goal(title="Trip", target_amount=2_000_000, current_amount=500_000, deadline=date(2024, 8, 1))

    progress = goal_progress(goal, today=date(2024, 7, 22))

    assert progress["progress_percentage"] == 25.0
    assert progress["remaining_amount"] == 1_500_000
    assert progress["days_left"] == 10
    assert progress["status"] == "In Progress"


def test_goal_progress_with_zero_target():
    goal = Goal(title="Someday", target_amount=0, current_amount=0, deadline=None)

    progress = goal_progress(goal, today=date(2024, 7, 22))

    assert progress["progress_percentage"] == 0.0
    assert progress["days_left"] is None


amounts = st.floats(min_value=0, max_value=1e9, allow_nan=False, allow_infinity=False)
days = st.integers(min_value=1, max_value=28)


@given(
    salaries=st.lists(st.tuples(amounts, days), max_size=5),
    living=st.lists(st.tuples(amounts, days), max_size=5),
    fixed=st.lists(amounts, max_size=5),
    savings=st.lists(st.tuples(amounts, st.integers(min_value=1, max_value=12)), max_size=5),
    holdings=amounts,
    include_deposits=st.booleans(),
)
def test_summary_identities_hold(salaries, living, fixed, savings, holdings, include_deposits):
    records = HouseholdRecords(
        salaries=[Salary(amount=a, date=date(2024, 5, d)) for a, d in salaries],
        living_expenses=[LivingExpense(amount=a, date=date(2024, 5, d), category="생활비") for a, d in living],
        fixed_expenses=[FixedExpense(name="f", amount=a, day_of_month=1) for a in fixed],
        savings=[Savings(type=SavingsType.SAVINGS, amount=a, date=date(2024, m, 1)) for a, m in savings],
    )

    summary = summarize_month(records, 2024, 5, holdings_total=holdings, include_deposits=include_deposits)

    assert summary.cash_balance == pytest.approx(summary.total_income - summary.total_expense)
    assert summary.total_assets == pytest.approx(
        summary.cash_balance + summary.total_savings + summary.total_investment
    )


@given(current=amounts, previous=st.floats(allow_nan=False, allow_infinity=False, min_value=-1e12, max_value=1e12))
def test_change_percent_is_always_finite(current, previous):
    result = change_percent(current, previous)

    assert result == result  # not NaN
    assert abs(result) != float("inf")
    if previous == 0:
        assert result == 0
