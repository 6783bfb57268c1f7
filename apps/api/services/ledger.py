"""Credit ledger: records submissions and keeps balances equal to entry totals."""

from __future__ import annotations

import asyncio
import logging
import re
from contextlib import asynccontextmanager
from datetime import date, datetime
from typing import Any, AsyncIterator, Dict, List, Optional, Union
import uuid

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from carbon.conversion import MAX_CREDIT_VALUE, convert, validate_quantity
from errors import InvalidInputError, StorageError, UserNotFoundError
from models.consumption_entry import ENTRY_KINDS, ConsumptionEntry
from services.storage import (
    append_entry,
    get_user,
    increment_credits,
    list_entries_for_user,
    sum_entry_credits,
)

logger = logging.getLogger(__name__)

# One writer per user inside this process; the UPDATE itself is an atomic
# increment, so other processes cannot lose an increment either.
# A lock is dropped once no task holds or waits on it.
_user_locks: Dict[str, asyncio.Lock] = {}
_lock_refcounts: Dict[str, int] = {}

_DATE_ONLY = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_DATE_TIME = re.compile(r"^\d{4}-\d{2}-\d{2}[T ]\d{2}:\d{2}")


@asynccontextmanager
async def _user_lock(user_id: str) -> AsyncIterator[None]:
    lock = _user_locks.get(user_id)
    if lock is None:
        lock = _user_locks[user_id] = asyncio.Lock()
    _lock_refcounts[user_id] = _lock_refcounts.get(user_id, 0) + 1
    try:
        async with lock:
            yield
    finally:
        _lock_refcounts[user_id] -= 1
        if _lock_refcounts[user_id] == 0:
            del _lock_refcounts[user_id]
            del _user_locks[user_id]


def parse_entry_date(value: Union[str, date, datetime, None]) -> date:
    """Accept a date, a datetime, "YYYY-MM-DD" or a full ISO-8601 datetime string."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value or "").strip()
    if not text:
        raise InvalidInputError("date is required")
    try:
        if _DATE_ONLY.match(text):
            return date.fromisoformat(text)
        if _DATE_TIME.match(text):
            normalized = text[:-1] + "+00:00" if text.endswith(("Z", "z")) else text
            return datetime.fromisoformat(normalized).date()
    except ValueError as exc:
        raise InvalidInputError(f"date {text!r} is not a valid YYYY-MM-DD date") from exc
    raise InvalidInputError(f"date {text!r} is not a valid YYYY-MM-DD date")


def _validate_submission(kind: str, category: str, quantity: Any, entry_date: Any):
    if kind not in ENTRY_KINDS:
        raise InvalidInputError(f"kind must be one of {', '.join(ENTRY_KINDS)}")
    label = " ".join(str(category or "").split())
    if not label:
        raise InvalidInputError("category is required")
    return label, validate_quantity(quantity), parse_entry_date(entry_date)


async def record_entry(
    user_id: str,
    db: AsyncSession,
    *,
    kind: str,
    category: str,
    quantity: Any,
    entry_date: Union[str, date, datetime],
) -> Dict[str, Any]:
    """
    Convert a submission and apply it to the user's ledger.

    The entry insert and the balance increment commit together or not at all.

    Returns:
        {"entry": ConsumptionEntry, "balance_after": int}
    """
    label, amount, activity_date = _validate_submission(kind, category, quantity, entry_date)

    async with _user_lock(user_id):
        user = await get_user(user_id, db)
        if user is None:
            raise UserNotFoundError(f"User {user_id} not found")

        result = convert(label, amount)
        if int(user.carbon_credits or 0) + result.credits_earned > MAX_CREDIT_VALUE:
            raise InvalidInputError("entry would push the credit balance past its maximum")
        entry = ConsumptionEntry(
            id=str(uuid.uuid4()),
            user_id=user_id,
            kind=kind,
            category=label,
            quantity=amount,
            date=activity_date,
            emission_factor=result.emission_factor,
            used_fallback_factor=result.used_fallback_factor,
            carbon_emissions=result.carbon_emissions,
            credits_earned=result.credits_earned,
        )
        try:
            await append_entry(entry, db)
            updated_user = await increment_credits(user_id, result.credits_earned, db)
            balance_after = int(updated_user.carbon_credits or 0)
            await db.commit()
        except (SQLAlchemyError, OverflowError) as exc:
            await db.rollback()
            logger.exception("Ledger write failed for user %s: %s", user_id, exc)
            raise StorageError("Could not record entry; nothing was applied.") from exc
        except UserNotFoundError:
            await db.rollback()
            raise

    await db.refresh(entry)
    logger.info(
        "ledger_entry user=%s kind=%s category=%s credits=%s balance=%s",
        user_id,
        kind,
        label,
        result.credits_earned,
        balance_after,
    )
    return {"entry": entry, "balance_after": balance_after}


async def list_entries(
    user_id: str,
    db: AsyncSession,
    kind: Optional[str] = None,
) -> List[ConsumptionEntry]:
    """Entry history, most recent activity date first."""
    if kind is not None and kind not in ENTRY_KINDS:
        raise InvalidInputError(f"kind must be one of {', '.join(ENTRY_KINDS)}")
    return await list_entries_for_user(user_id, db, kind=kind, newest_first=True)


async def get_credit_balance(user_id: str, db: AsyncSession) -> int:
    user = await get_user(user_id, db)
    if user is None:
        raise UserNotFoundError(f"User {user_id} not found")
    return int(user.carbon_credits or 0)


async def verify_balance(user_id: str, db: AsyncSession) -> Dict[str, Any]:
    """Compare the stored balance against the sum of the user's entries."""
    balance = await get_credit_balance(user_id, db)
    ledger_total = await sum_entry_credits(user_id, db)
    return {
        "balance": balance,
        "ledger_total": ledger_total,
        "consistent": balance == ledger_total,
    }
