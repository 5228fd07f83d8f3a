# app/utils/store.py
"""
In-memory view of one household's records.

`HouseholdStore` keeps every record collection loaded from a
`HouseholdRepository`. Mutations are staged first, sent to the repository
and only applied to the collections once the repository call succeeded; a
failed call discards the staged change and leaves the collections as they
were.
"""
import itertools
import logging
import uuid
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Optional, Protocol

from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from app.crud import allowance as allowance_crud
from app.crud import fixed_expense as fixed_expense_crud
from app.crud import goal as goal_crud
from app.crud import investment as investment_crud
from app.crud import ledger as ledger_crud
from app.crud import living_expense as living_expense_crud
from app.crud import salary as salary_crud
from app.crud import savings as savings_crud
from app.models.user import User
from app.utils.aggregation import HouseholdRecords

logger = logging.getLogger(__name__)


class RecordNotFoundError(LookupError):
    pass


@dataclass(frozen=True)
class RecordOps:
    list: Callable[..., Awaitable[List[Any]]]
    get: Callable[..., Awaitable[Optional[Any]]]
    create: Callable[..., Awaitable[Any]]
    update: Callable[..., Awaitable[Any]]
    delete: Callable[..., Awaitable[None]]


# Keys double as the HouseholdRecords field names
RECORD_OPS: Dict[str, RecordOps] = {
    "salaries": RecordOps(
        salary_crud.get_salaries_for_household, salary_crud.get_salary_by_id,
        salary_crud.create_salary, salary_crud.update_salary, salary_crud.delete_salary,
    ),
    "fixed_expenses": RecordOps(
        fixed_expense_crud.get_fixed_expenses_for_household, fixed_expense_crud.get_fixed_expense_by_id,
        fixed_expense_crud.create_fixed_expense, fixed_expense_crud.update_fixed_expense,
        fixed_expense_crud.delete_fixed_expense,
    ),
    "living_expenses": RecordOps(
        living_expense_crud.get_living_expenses_for_household, living_expense_crud.get_living_expense_by_id,
        living_expense_crud.create_living_expense, living_expense_crud.update_living_expense,
        living_expense_crud.delete_living_expense,
    ),
    "allowances": RecordOps(
        allowance_crud.get_allowances_for_household, allowance_crud.get_allowance_by_id,
        allowance_crud.create_allowance, allowance_crud.update_allowance, allowance_crud.delete_allowance,
    ),
    "ledger_transactions": RecordOps(
        ledger_crud.get_ledger_transactions_for_household, ledger_crud.get_ledger_transaction_by_id,
        ledger_crud.create_ledger_transaction, ledger_crud.update_ledger_transaction,
        ledger_crud.delete_ledger_transaction,
    ),
    "savings": RecordOps(
        savings_crud.get_savings_for_household, savings_crud.get_savings_by_id,
        savings_crud.create_savings, savings_crud.update_savings, savings_crud.delete_savings,
    ),
    "investments": RecordOps(
        investment_crud.get_investments_for_household, investment_crud.get_investment_by_id,
        investment_crud.create_investment, investment_crud.update_investment, investment_crud.delete_investment,
    ),
    "goals": RecordOps(
        goal_crud.get_goals_for_household, goal_crud.get_goal_by_id,
        goal_crud.create_goal, goal_crud.update_goal, goal_crud.delete_goal,
    ),
}

RECORD_KINDS = tuple(RECORD_OPS)


class HouseholdRepository(Protocol):
    async def list(self, kind: str) -> List[Any]: ...

    async def create(self, kind: str, data: BaseModel) -> Any: ...

    async def update(self, kind: str, record_id: uuid.UUID, data: BaseModel) -> Any: ...

    async def delete(self, kind: str, record_id: uuid.UUID) -> None: ...


class SqlHouseholdRepository:
    """Repository over the crud layer, scoped to one member's household."""

    def __init__(self, db: AsyncSession, member: User):
        self.db = db
        self.member_id = member.id
        self.user_ids = list(member.household_ids)

    @staticmethod
    def _ops(kind: str) -> RecordOps:
        try:
            return RECORD_OPS[kind]
        except KeyError:
            raise ValueError(f"Unknown record kind: {kind}") from None

    async def _get_or_raise(self, kind: str, record_id: uuid.UUID) -> Any:
        record = await self._ops(kind).get(record_id, self.user_ids, self.db)
        if record is None:
            raise RecordNotFoundError(f"{kind} record {record_id} not found")
        return record

    async def list(self, kind: str) -> List[Any]:
        return list(await self._ops(kind).list(self.user_ids, self.db))

    async def create(self, kind: str, data: BaseModel) -> Any:
        try:
            return await self._ops(kind).create(self.member_id, data, self.db)
        except Exception:
            await self.db.rollback()
            raise

    async def update(self, kind: str, record_id: uuid.UUID, data: BaseModel) -> Any:
        record = await self._get_or_raise(kind, record_id)
        try:
            return await self._ops(kind).update(record, data, self.db)
        except Exception:
            await self.db.rollback()
            raise

    async def delete(self, kind: str, record_id: uuid.UUID) -> None:
        record = await self._get_or_raise(kind, record_id)
        try:
            await self._ops(kind).delete(record, self.db)
        except Exception:
            await self.db.rollback()
            raise


@dataclass
class StagedChange:
    op: str
    kind: str
    record_id: Optional[uuid.UUID] = None


class HouseholdStore:
    def __init__(self, repository: HouseholdRepository):
        self.repository = repository
        self.collections: Dict[str, List[Any]] = {kind: [] for kind in RECORD_KINDS}
        self.is_loading = False
        self.error: Optional[str] = None
        self.pending: Dict[int, StagedChange] = {}
        self._tokens = itertools.count(1)

    def __getattr__(self, name: str) -> List[Any]:
        collections = self.__dict__.get("collections", {})
        if name in collections:
            return collections[name]
        raise AttributeError(name)

    def clear_error(self) -> None:
        self.error = None

    def records(self) -> HouseholdRecords:
        return HouseholdRecords(**{kind: list(items) for kind, items in self.collections.items()})

    async def load_all(self) -> HouseholdRecords:
        """Replace every collection with what the repository holds now."""
        self.is_loading = True
        self.error = None
        try:
            loaded = {kind: await self.repository.list(kind) for kind in RECORD_KINDS}
        except Exception as e:
            self.error = str(e)
            logger.error(f"Error loading household records: {str(e)}")
            raise
        finally:
            self.is_loading = False
        self.collections = loaded
        return self.records()

    # ── stage → confirm / rollback ─────────────────────────────────────────────
    def _stage(self, op: str, kind: str, record_id: Optional[uuid.UUID] = None) -> int:
        if kind not in self.collections:
            raise ValueError(f"Unknown record kind: {kind}")
        token = next(self._tokens)
        self.pending[token] = StagedChange(op=op, kind=kind, record_id=record_id)
        return token

    def _rollback(self, token: int, error: Exception) -> None:
        change = self.pending.pop(token)
        self.error = str(error)
        logger.error(f"Error during {change.op} on {change.kind}: {str(error)}")

    def _confirm(self, token: int, record: Any = None) -> None:
        change = self.pending.pop(token)
        items = self.collections[change.kind]
        if change.op == "add":
            items.insert(0, record)
        elif change.op == "update":
            self.collections[change.kind] = [
                record if item.id == change.record_id else item for item in items
            ]
        elif change.op == "remove":
            self.collections[change.kind] = [item for item in items if item.id != change.record_id]

    async def add(self, kind: str, data: BaseModel) -> Any:
        token = self._stage("add", kind)
        try:
            record = await self.repository.create(kind, data)
        except Exception as e:
            self._rollback(token, e)
            raise
        self._confirm(token, record)
        return record

    async def update(self, kind: str, record_id: uuid.UUID, data: BaseModel) -> Any:
        token = self._stage("update", kind, record_id)
        try:
            record = await self.repository.update(kind, record_id, data)
        except Exception as e:
            self._rollback(token, e)
            raise
        self._confirm(token, record)
        return record

    async def remove(self, kind: str, record_id: uuid.UUID) -> None:
        token = self._stage("remove", kind, record_id)
        try:
            await self.repository.delete(kind, record_id)
        except Exception as e:
            self._rollback(token, e)
            raise
        self._confirm(token)
