"""Energy billing submissions router."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from carbon.factors import list_categories
from database import get_db
from models.consumption_entry import ENTRY_KIND_BILLING
from routers.auth_scope import AuthContext, get_auth_context
from routers.rate_limit import rate_limit
from routers.submissions import SubmissionRequest, submit_entry
from services.ledger import list_entries

router = APIRouter()


@router.get("/energy-types")
async def energy_types():
    return {"categories": list_categories(ENTRY_KIND_BILLING)}


@router.post("", status_code=201)
async def upload_billing_data(
    request: SubmissionRequest,
    _rate_limit: None = Depends(rate_limit("billing_submit", limit=120, window_seconds=3600)),
    auth: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    return await submit_entry(auth.user_id, ENTRY_KIND_BILLING, request, db)


@router.get("/history")
async def billing_history(
    auth: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    entries = await list_entries(auth.user_id, db, kind=ENTRY_KIND_BILLING)
    return {"success": True, "entries": [entry.to_dict() for entry in entries]}
