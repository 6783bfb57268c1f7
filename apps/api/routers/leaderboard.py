"""Leaderboard router."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from database import get_db
from routers.auth_scope import AuthContext, get_auth_context
from services.leaderboard import get_leaderboard, get_user_standing

router = APIRouter()


@router.get("")
async def leaderboard(
    limit: Optional[int] = Query(default=None, ge=1, le=1000),
    db: AsyncSession = Depends(get_db),
):
    payload = await get_leaderboard(db, limit=limit)
    payload["success"] = True
    return payload


@router.get("/me")
async def my_standing(
    auth: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    return await get_user_standing(auth.user_id, db)
