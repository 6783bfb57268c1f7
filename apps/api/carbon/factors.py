"""
Emission factor table (kg CO2 per unit of consumption).

Energy factors follow US EPA combustion values. Recycling factors are the
avoided-emission rates that yield the advertised credit rates at 100 credits
per kg CO2 (Plastic 50/kg, Paper 75/kg, Glass 60/kg, Metal 85/kg,
E-Waste 200/kg, Organic 40/kg).
"""

from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Tuple


logger = logging.getLogger(__name__)

# Energy billing (kg CO2 / unit)
ENERGY_FACTORS: Mapping[str, float] = MappingProxyType({
    "Electricity (kWh)": 0.4,
    "Natural Gas (therms)": 11.7,
    "Fuel Oil (gallons)": 10.15,
    "Gasoline (gallons)": 8.89,
})

# Recycling (kg CO2 avoided / kg material)
RECYCLING_FACTORS: Mapping[str, float] = MappingProxyType({
    "Plastic (kg)": 0.5,
    "Paper (kg)": 0.75,
    "Glass (kg)": 0.6,
    "Metal (kg)": 0.85,
    "E-Waste (kg)": 2.0,
    "Organic (kg)": 0.4,
})

EMISSION_FACTORS: Mapping[str, float] = MappingProxyType({**ENERGY_FACTORS, **RECYCLING_FACTORS})

# Applied to categories missing from the table instead of rejecting the submission.
DEFAULT_EMISSION_FACTOR: float = 0.5

_FACTORS_BY_KIND: Dict[str, Mapping[str, float]] = {
    "billing": ENERGY_FACTORS,
    "recycling": RECYCLING_FACTORS,
}


def _normalize(category: str) -> str:
    return " ".join(str(category or "").split()).lower()


_NORMALIZED_INDEX: Dict[str, str] = {_normalize(name): name for name in EMISSION_FACTORS}


def canonical_category(category: str) -> Optional[str]:
    """Return the table's spelling of `category`, or None when unknown."""
    if category in EMISSION_FACTORS:
        return category
    return _NORMALIZED_INDEX.get(_normalize(category))


def resolve_factor(category: str) -> Tuple[float, bool]:
    """Return `(factor, used_fallback)` for a category label."""
    name = canonical_category(category)
    if name is None:
        logger.warning("Unknown emission category %r; applying default factor %s", category, DEFAULT_EMISSION_FACTOR)
        return DEFAULT_EMISSION_FACTOR, True
    return EMISSION_FACTORS[name], False


def factor_for(category: str) -> float:
    """kg CO2 per unit for `category`, falling back to DEFAULT_EMISSION_FACTOR."""
    factor, _ = resolve_factor(category)
    return factor


def list_categories(kind: Optional[str] = None) -> List[Dict[str, object]]:
    """Categories and factors for form dropdowns, optionally filtered by entry kind."""
    if kind is None:
        kinds = list(_FACTORS_BY_KIND)
    elif kind in _FACTORS_BY_KIND:
        kinds = [kind]
    else:
        return []
    return [
        {"category": name, "kind": entry_kind, "emission_factor": factor}
        for entry_kind in kinds
        for name, factor in _FACTORS_BY_KIND[entry_kind].items()
    ]
