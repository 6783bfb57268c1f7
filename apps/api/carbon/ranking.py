"""
Leaderboard ranking and badge assignment.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Iterable, List, Mapping, Optional

from config import settings

from .conversion import round_half_up
from .models import Badge, LeaderboardRow


BADGES_BY_RANK = {1: Badge.GOLD, 2: Badge.SILVER, 3: Badge.BRONZE}


def _field(user: Any, name: str) -> Any:
    if isinstance(user, dict):
        return user.get(name)
    return getattr(user, name, None)


def _credits(user: Any) -> int:
    return int(_field(user, "carbon_credits") or 0)


def ranking_key(user: Any):
    """Credits descending, then username ascending, then id ascending."""
    return (-_credits(user), str(_field(user, "username") or ""), str(_field(user, "id") or ""))


def badge_for_rank(rank: int) -> Badge:
    return BADGES_BY_RANK.get(rank, Badge.NONE)


def estimate_reduction_kg(credits: int, kg_per_credit: Optional[float] = None) -> float:
    ratio = settings.ESTIMATED_REDUCTION_KG_PER_CREDIT if kg_per_credit is None else kg_per_credit
    return float(round_half_up(Decimal(int(credits)) * Decimal(str(ratio)), 2))


def rank_users(
    users: Iterable[Any],
    kg_per_credit: Optional[float] = None,
    submissions: Optional[Mapping[str, int]] = None,
) -> List[LeaderboardRow]:
    """
    Rank every user by credit balance.

    Ranks are assigned sequentially after sorting (1..N, no shared ranks);
    equal balances are ordered by username so repeated calls on the same
    snapshot agree.

    `submissions` maps user id to entry count; missing ids count as 0.
    """
    ordered = sorted(users, key=ranking_key)
    counts = submissions or {}
    rows: List[LeaderboardRow] = []
    for position, user in enumerate(ordered, start=1):
        credits = _credits(user)
        user_id = str(_field(user, "id"))
        rows.append(
            LeaderboardRow(
                rank=position,
                user_id=user_id,
                username=str(_field(user, "username") or ""),
                full_name=_field(user, "full_name"),
                credits=credits,
                estimated_reduction_kg=estimate_reduction_kg(credits, kg_per_credit),
                badge=badge_for_rank(position),
                submissions=int(counts.get(user_id, 0)),
            )
        )
    return rows
