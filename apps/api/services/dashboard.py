"""Dashboard summary assembly for an authenticated user."""

from __future__ import annotations

from typing import Any, Dict

from sqlalchemy.ext.asyncio import AsyncSession

from carbon.aggregation import summarize
from errors import UserNotFoundError
from services.storage import get_user, list_entries_for_user


async def summarize_user(user_id: str, db: AsyncSession) -> Dict[str, Any]:
    user = await get_user(user_id, db)
    if user is None:
        raise UserNotFoundError(f"User {user_id} not found")

    entries = await list_entries_for_user(user_id, db)
    summary = summarize(entries)
    payload = summary.model_dump(mode="json")
    payload["credit_balance"] = int(user.carbon_credits or 0)
    payload["recent_entries"] = [entry.to_dict() for entry in reversed(entries[-5:])]
    return payload
