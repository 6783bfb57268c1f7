"""Repository helpers over users and consumption entries."""

from __future__ import annotations

from typing import Dict, List, Optional

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy.sql import func

from errors import UserNotFoundError
from models.consumption_entry import ConsumptionEntry
from models.user import User


async def get_user(user_id: str, db: AsyncSession) -> Optional[User]:
    result = await db.execute(select(User).where(User.id == user_id))
    return result.scalar_one_or_none()


async def increment_credits(user_id: str, delta: int, db: AsyncSession) -> User:
    """Add `delta` to the stored balance in one UPDATE. Caller owns the transaction."""
    result = await db.execute(
        update(User)
        .where(User.id == user_id)
        .values(carbon_credits=User.carbon_credits + int(delta), updated_at=func.now())
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        raise UserNotFoundError(f"User {user_id} not found")

    refreshed = await db.execute(
        select(User).where(User.id == user_id).execution_options(populate_existing=True)
    )
    return refreshed.scalar_one()


async def append_entry(entry: ConsumptionEntry, db: AsyncSession) -> str:
    db.add(entry)
    await db.flush()
    return entry.id


async def list_entries_for_user(
    user_id: str,
    db: AsyncSession,
    *,
    kind: Optional[str] = None,
    newest_first: bool = False,
) -> List[ConsumptionEntry]:
    query = select(ConsumptionEntry).where(ConsumptionEntry.user_id == user_id)
    if kind:
        query = query.where(ConsumptionEntry.kind == kind)
    if newest_first:
        query = query.order_by(ConsumptionEntry.date.desc(), ConsumptionEntry.created_at.desc())
    else:
        query = query.order_by(ConsumptionEntry.date.asc(), ConsumptionEntry.created_at.asc())
    result = await db.execute(query)
    return list(result.scalars().all())


async def list_all_users(db: AsyncSession) -> List[User]:
    result = await db.execute(
        select(User).order_by(User.carbon_credits.desc(), User.username.asc(), User.id.asc())
    )
    return list(result.scalars().all())


async def sum_entry_credits(user_id: str, db: AsyncSession) -> int:
    result = await db.execute(
        select(func.coalesce(func.sum(ConsumptionEntry.credits_earned), 0)).where(
            ConsumptionEntry.user_id == user_id
        )
    )
    return int(result.scalar() or 0)


async def count_entries_by_user(db: AsyncSession) -> Dict[str, int]:
    """Number of recorded entries per user id; users with none are absent."""
    result = await db.execute(
        select(ConsumptionEntry.user_id, func.count(ConsumptionEntry.id)).group_by(ConsumptionEntry.user_id)
    )
    return {user_id: int(count) for user_id, count in result.all()}
