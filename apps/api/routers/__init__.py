"""Routers package."""

from . import (
    health,
    auth,
    billing,
    recycling,
    dashboard,
    leaderboard,
)
