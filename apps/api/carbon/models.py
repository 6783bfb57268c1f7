"""
Carbon engine result models.
"""

from typing import Dict, List, Optional
from pydantic import BaseModel
from enum import Enum


class Badge(str, Enum):
    GOLD = "gold"
    SILVER = "silver"
    BRONZE = "bronze"
    NONE = "none"


class ConversionResult(BaseModel):
    """Emissions and credits derived from one submission."""
    carbon_emissions: float        # kg CO2
    credits_earned: int
    emission_factor: float         # kg CO2 per unit actually applied
    used_fallback_factor: bool = False


class MonthlyAggregate(BaseModel):
    month: str                     # "YYYY-MM"
    total_emissions: float
    total_credits_earned: int
    entry_count: int


class CategoryTotals(BaseModel):
    total_quantity: float
    total_emissions: float
    total_credits: int
    entry_count: int


class DashboardSummary(BaseModel):
    """Dashboard totals for one user.

    `total_consumption` adds quantities across categories whose units differ
    (kWh, therms, gallons, kg). It is a raw activity count, not a physical
    quantity; `consumption_units_mixed` says so to the client.
    """
    total_consumption: float
    total_emissions: float
    total_credits: int
    entry_count: int
    consumption_units_mixed: bool = True
    monthly: List[MonthlyAggregate] = []
    by_kind: Dict[str, CategoryTotals] = {}
    by_category: Dict[str, CategoryTotals] = {}


class LeaderboardRow(BaseModel):
    rank: int
    user_id: str
    username: str
    full_name: Optional[str] = None
    credits: int
    # Approximation from the credit balance, not a sum of recorded emissions.
    estimated_reduction_kg: float
    badge: Badge
    submissions: int = 0
