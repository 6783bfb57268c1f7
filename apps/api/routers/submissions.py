"""Request/response shapes shared by the billing and recycling routers."""

from __future__ import annotations

from typing import Any, Dict

from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from services.ledger import record_entry


class SubmissionRequest(BaseModel):
    category: str = Field(min_length=1, max_length=120)
    quantity: float = Field(gt=0)
    date: str = Field(min_length=1, description="Activity date, YYYY-MM-DD")


async def submit_entry(user_id: str, kind: str, request: SubmissionRequest, db: AsyncSession) -> Dict[str, Any]:
    result = await record_entry(
        user_id,
        db,
        kind=kind,
        category=request.category,
        quantity=request.quantity,
        entry_date=request.date,
    )
    entry = result["entry"]
    return {
        "success": True,
        "entry": entry.to_dict(),
        "carbon_emissions": entry.carbon_emissions,
        "credits_earned": entry.credits_earned,
        "used_fallback_factor": bool(entry.used_fallback_factor),
        "balance_after": result["balance_after"],
    }
