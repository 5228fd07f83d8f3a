# app/utils/aggregation.py
"""
Monthly household figures for the dashboard.

Everything here is plain arithmetic over already loaded records, so it can be
fed ORM rows, the in-memory store or test doubles alike. Records only need
the attributes the formulas read (amount, date, category, type, ...).
"""
import calendar
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, Iterable, List, Optional, Tuple

from app.models.ledger import TransactionType


@dataclass
class HouseholdRecords:
    salaries: List[Any] = field(default_factory=list)
    fixed_expenses: List[Any] = field(default_factory=list)
    living_expenses: List[Any] = field(default_factory=list)
    allowances: List[Any] = field(default_factory=list)
    ledger_transactions: List[Any] = field(default_factory=list)
    savings: List[Any] = field(default_factory=list)
    investments: List[Any] = field(default_factory=list)
    goals: List[Any] = field(default_factory=list)

    def dated(self) -> Iterable[Any]:
        """Every record that carries a calendar date."""
        for bucket in (
            self.salaries,
            self.living_expenses,
            self.allowances,
            self.ledger_transactions,
            self.savings,
            self.investments,
        ):
            yield from bucket


@dataclass
class MonthlySummary:
    month: str
    total_income: float
    total_expense: float
    cash_balance: float
    total_savings: float
    total_investment: float
    total_assets: float


# ────────────────────────────────────────────────────────────────────────────────
# HELPERS – CALENDAR
# ────────────────────────────────────────────────────────────────────────────────
def month_label(year: int, month: int) -> str:
    return f"{year:04d}-{month:02d}"


def month_end(year: int, month: int) -> date:
    return date(year, month, calendar.monthrange(year, month)[1])


def shift_month(year: int, month: int, delta: int) -> Tuple[int, int]:
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1


def _in_month(day: date, year: int, month: int) -> bool:
    return day.year == year and day.month == month


def _total(records: Iterable[Any]) -> float:
    return sum(float(r.amount or 0) for r in records)


# ────────────────────────────────────────────────────────────────────────────────
# HELPERS – VALUES
# ────────────────────────────────────────────────────────────────────────────────
def local_investment_value(investments: Iterable[Any], until: date) -> float:
    """Current value where one was entered, principal otherwise."""
    return sum(
        float(i.current_value or i.amount or 0)
        for i in investments
        if i.date <= until
    )


def month_end_investment(
    snapshots: Iterable[Any],
    year: int,
    month: int,
    investments: Iterable[Any] = (),
) -> Optional[float]:
    """Household investment value as of the month's last day.

    Each member's latest snapshot taken on or before that day counts once.
    Members without such a snapshot contribute the local value of the
    investments they created. Returns None when nobody saved a snapshot yet.
    """
    cutoff = month_end(year, month)
    eligible = [s for s in snapshots if s.snapshot_date <= cutoff]
    if not eligible:
        return None
    latest_per_user: Dict[Any, Any] = {}
    for snap in eligible:
        current = latest_per_user.get(snap.user_id)
        if current is None or snap.snapshot_date > current.snapshot_date:
            latest_per_user[snap.user_id] = snap
    snapshot_value = sum(
        float(s.kis_total_value) if (s.kis_total_value or 0) > 0 else float(s.investment_amount or 0)
        for s in latest_per_user.values()
    )
    unsnapshotted = [i for i in investments if i.created_by not in latest_per_user]
    return snapshot_value + local_investment_value(unsnapshotted, cutoff)


def change_percent(current: float, previous: float) -> float:
    """Month-over-month change in percent; 0 when there is nothing to compare to."""
    if not previous:
        return 0.0
    return (current - previous) / abs(previous) * 100


def has_activity(records: HouseholdRecords, year: int, month: int) -> bool:
    return any(_in_month(r.date, year, month) for r in records.dated())


def has_history(records: HouseholdRecords, snapshots: Iterable[Any], until: date) -> bool:
    return (
        any(r.date <= until for r in records.dated())
        or any(s.snapshot_date <= until for s in snapshots)
    )


# ────────────────────────────────────────────────────────────────────────────────
# MAIN ENTRY
# ────────────────────────────────────────────────────────────────────────────────
def summarize_month(
    records: HouseholdRecords,
    year: int,
    month: int,
    holdings_total: float = 0.0,
    include_deposits: bool = False,
    living_category: str = "생활비",
    investment_value: Optional[float] = None,
) -> MonthlySummary:
    """
    Income, expense, cash and asset totals for one calendar month.

    - income: salaries + ledger INCOME dated in the month
    - expense: every fixed expense (they recur monthly) + living expenses of
      `living_category` + allowances + ledger EXPENSE dated in the month,
      plus savings/investment deposits of the month when `include_deposits`
    - savings and investments are cumulative up to the month's last day
    - a non-zero `holdings_total` replaces the local investment value;
      otherwise `investment_value` (e.g. from a snapshot) is used when given
    """
    last_day = month_end(year, month)

    def this_month(items: Iterable[Any]) -> List[Any]:
        return [r for r in items if _in_month(r.date, year, month)]

    monthly_salary = _total(this_month(records.salaries))
    ledger_this_month = this_month(records.ledger_transactions)
    ledger_income = _total(t for t in ledger_this_month if t.type == TransactionType.INCOME)
    ledger_expense = _total(t for t in ledger_this_month if t.type == TransactionType.EXPENSE)

    fixed = _total(records.fixed_expenses)
    living = _total(e for e in this_month(records.living_expenses) if e.category == living_category)
    allowance = _total(this_month(records.allowances))

    total_income = monthly_salary + ledger_income
    total_expense = fixed + living + allowance + ledger_expense
    if include_deposits:
        total_expense += _total(this_month(records.savings)) + _total(this_month(records.investments))

    total_savings = _total(s for s in records.savings if s.date <= last_day)

    if holdings_total:
        total_investment = float(holdings_total)
    elif investment_value is not None:
        total_investment = float(investment_value)
    else:
        total_investment = local_investment_value(records.investments, last_day)

    cash_balance = total_income - total_expense
    return MonthlySummary(
        month=month_label(year, month),
        total_income=total_income,
        total_expense=total_expense,
        cash_balance=cash_balance,
        total_savings=total_savings,
        total_investment=total_investment,
        total_assets=cash_balance + total_savings + total_investment,
    )


def monthly_history(
    records: HouseholdRecords,
    snapshots: Iterable[Any],
    today: date,
    months: int = 6,
    holdings_total: float = 0.0,
    include_deposits: bool = False,
    living_category: str = "생활비",
) -> List[MonthlySummary]:
    """
    Oldest-first summaries for up to `months` months ending with today's
    month, skipping months without any dated record.

    Past months take their investment value from the saved month-end
    snapshot instead of re-deriving it; the current month uses live holdings.
    """
    snapshots = list(snapshots)
    history: List[MonthlySummary] = []
    for offset in range(months - 1, -1, -1):
        year, month = shift_month(today.year, today.month, -offset)
        if not has_activity(records, year, month):
            continue
        if offset == 0:
            history.append(summarize_month(
                records, year, month,
                holdings_total=holdings_total,
                include_deposits=include_deposits,
                living_category=living_category,
            ))
        else:
            history.append(summarize_month(
                records, year, month,
                include_deposits=include_deposits,
                living_category=living_category,
                investment_value=month_end_investment(snapshots, year, month, records.investments),
            ))
    return history


def build_dashboard(
    records: HouseholdRecords,
    snapshots: Iterable[Any],
    today: date,
    holdings_total: float = 0.0,
    include_deposits: bool = False,
    living_category: str = "생활비",
    history_months: int = 6,
) -> Dict[str, Any]:
    """Current month, previous month (snapshot based) and the change between them.

    The previous month is summarized whenever anything was recorded or
    snapshotted on or before its last day, so carried-over savings and
    investments form the baseline even for a month without activity.
    Only a household with no history at all compares against 0.
    """
    snapshots = list(snapshots)
    current = summarize_month(
        records, today.year, today.month,
        holdings_total=holdings_total,
        include_deposits=include_deposits,
        living_category=living_category,
    )

    prev_year, prev_month = shift_month(today.year, today.month, -1)
    previous: Optional[MonthlySummary] = None
    if has_history(records, snapshots, month_end(prev_year, prev_month)):
        previous = summarize_month(
            records, prev_year, prev_month,
            include_deposits=include_deposits,
            living_category=living_category,
            investment_value=month_end_investment(snapshots, prev_year, prev_month, records.investments),
        )
    previous_assets = previous.total_assets if previous else 0.0

    return {
        "current": current,
        "previous": previous,
        "change": {
            "previous_assets": previous_assets,
            "amount": current.total_assets - previous_assets,
            "percentage": change_percent(current.total_assets, previous_assets),
        },
        "history": monthly_history(
            records, snapshots, today,
            months=history_months,
            holdings_total=holdings_total,
            include_deposits=include_deposits,
            living_category=living_category,
        ),
    }


def goal_progress(goal: Any, today: Optional[date] = None) -> Dict[str, Any]:
    """Progress of a goal towards its target amount."""
    today = today or date.today()
    target = float(goal.target_amount or 0)
    current = float(goal.current_amount or 0)
    percentage = (current / target * 100) if target > 0 else 0.0
    days_left = (goal.deadline - today).days if goal.deadline else None

    if target > 0 and current >= target:
        status = "Completed"
    elif days_left is not None and days_left < 0:
        status = "Overdue"
    else:
        status = "In Progress"

    return {
        "target_amount": target,
        "current_amount": current,
        "remaining_amount": max(target - current, 0.0),
        "progress_percentage": round(percentage, 2),
        "days_left": days_left,
        "status": status,
    }
