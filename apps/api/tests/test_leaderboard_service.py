from datetime import date

import pytest

from errors import UserNotFoundError
from models.consumption_entry import ConsumptionEntry
from models.user import User
from services.leaderboard import get_leaderboard, get_user_standing


@pytest.mark.asyncio
async def test_limit_truncates_rows_not_totals(session_maker):
    async with session_maker() as db:
        for i, credits in enumerate([500, 900, 900, 100, 0]):
            db.add(
                User(
                    id=f"user-{i}",
                    username=f"player{i}",
                    email=f"player{i}@example.com",
                    password_hash="x",
                    carbon_credits=credits,
                )
            )
        await db.commit()

        board = await get_leaderboard(db, limit=3)
        standing = await get_user_standing("user-4", db)

    rows = board["leaderboard"]
    assert len(rows) == 3
    assert [row["username"] for row in rows] == ["player1", "player2", "player0"]
    assert [row["rank"] for row in rows] == [1, 2, 3]
    assert [row["badge"] for row in rows] == ["gold", "silver", "bronze"]
    assert board["total_users"] == 5
    assert board["total_credits"] == 2400
    assert board["total_reduction_kg"] == 24.0
    assert standing["rank"] == 5
    assert standing["badge"] == "none"


@pytest.mark.asyncio
async def test_empty_leaderboard(session_maker):
    async with session_maker() as db:
        board = await get_leaderboard(db)
        with pytest.raises(UserNotFoundError):
            await get_user_standing("nobody", db)
    assert board["leaderboard"] == []
    assert board["total_users"] == 0
    assert board["total_reduction_kg"] == 0


@pytest.mark.asyncio
async def test_rows_carry_submission_counts(session_maker):
    async with session_maker() as db:
        for user_id, credits in (("busy", 300), ("idle", 700)):
            db.add(
                User(
                    id=user_id,
                    username=user_id,
                    email=f"{user_id}@example.com",
                    password_hash="x",
                    carbon_credits=credits,
                )
            )
        for day in (1, 2, 3):
            db.add(
                ConsumptionEntry(
                    id=f"entry-{day}",
                    user_id="busy",
                    kind="recycling",
                    category="Paper (kg)",
                    quantity=1,
                    date=date(2024, 4, day),
                    emission_factor=0.75,
                    used_fallback_factor=False,
                    carbon_emissions=0.75,
                    credits_earned=100,
                )
            )
        await db.commit()

        board = await get_leaderboard(db)
        standing = await get_user_standing("busy", db)

    counts = {row["user_id"]: row["submissions"] for row in board["leaderboard"]}
    assert counts == {"idle": 0, "busy": 3}
    assert standing["submissions"] == 3
    assert standing["rank"] == 2
