import pytest

from carbon.factors import (
    DEFAULT_EMISSION_FACTOR,
    EMISSION_FACTORS,
    canonical_category,
    factor_for,
    list_categories,
    resolve_factor,
)


@pytest.mark.parametrize(
    "category, expected",
    [
        ("Electricity (kWh)", 0.4),
        ("Natural Gas (therms)", 11.7),
        ("Fuel Oil (gallons)", 10.15),
        ("Gasoline (gallons)", 8.89),
        ("E-Waste (kg)", 2.0),
    ],
)
def test_known_categories(category, expected):
    assert factor_for(category) == expected
    assert resolve_factor(category) == (expected, False)


def test_lookup_ignores_case_and_spacing():
    assert canonical_category("  electricity   (KWH) ") == "Electricity (kWh)"
    assert factor_for("natural gas (therms)") == 11.7


def test_unknown_category_falls_back(caplog):
    with caplog.at_level("WARNING"):
        factor, used_fallback = resolve_factor("Coal (tons)")
    assert factor == DEFAULT_EMISSION_FACTOR
    assert used_fallback is True
    assert "Coal (tons)" in caplog.text


def test_table_is_read_only():
    with pytest.raises(TypeError):
        EMISSION_FACTORS["Electricity (kWh)"] = 1.0


def test_list_categories_by_kind():
    billing = list_categories("billing")
    recycling = list_categories("recycling")
    assert {row["kind"] for row in billing} == {"billing"}
    assert {row["kind"] for row in recycling} == {"recycling"}
    assert len(list_categories()) == len(billing) + len(recycling) == len(EMISSION_FACTORS)
    assert list_categories("compost") == []
