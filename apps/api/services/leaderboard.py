"""Leaderboard snapshot helpers."""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Dict, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from carbon.ranking import rank_users
from config import settings
from errors import UserNotFoundError
from services.storage import count_entries_by_user, list_all_users


async def get_leaderboard(db: AsyncSession, limit: Optional[int] = None) -> Dict[str, Any]:
    """Rank every user; `limit` truncates the returned rows, not the totals."""
    users = await list_all_users(db)
    rows = rank_users(users, submissions=await count_entries_by_user(db))
    max_rows = int(limit if limit is not None else settings.LEADERBOARD_LIMIT)
    total_reduction = sum((Decimal(str(row.estimated_reduction_kg)) for row in rows), Decimal(0))
    return {
        "leaderboard": [row.model_dump(mode="json") for row in rows[: max(max_rows, 0)]],
        "total_users": len(rows),
        "total_credits": sum(row.credits for row in rows),
        "total_reduction_kg": float(total_reduction),
        "reduction_is_estimate": True,
    }


async def get_user_standing(user_id: str, db: AsyncSession) -> Dict[str, Any]:
    users = await list_all_users(db)
    rows = rank_users(users, submissions=await count_entries_by_user(db))
    for row in rows:
        if row.user_id == user_id:
            payload = row.model_dump(mode="json")
            payload["total_users"] = len(rows)
            payload["reduction_is_estimate"] = True
            return payload
    raise UserNotFoundError(f"User {user_id} not found")
