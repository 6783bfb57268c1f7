"""Dashboard router."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from database import get_db
from routers.auth_scope import AuthContext, get_auth_context
from services.dashboard import summarize_user
from services.ledger import verify_balance

router = APIRouter()


@router.get("/summary")
async def dashboard_summary(
    auth: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    return await summarize_user(auth.user_id, db)


@router.get("/ledger-check")
async def ledger_check(
    auth: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    """Report whether the stored balance matches the sum of recorded entries."""
    return await verify_balance(auth.user_id, db)
