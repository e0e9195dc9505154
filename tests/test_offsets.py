# -*- coding: utf-8 -*-
"""Tests for the offset catalog and selector."""

import logging

import pytest

from esg_engine.exceptions import InvalidConsumption
from esg_engine.models import OffsetProvider, OffsetType
from esg_engine.offsets import CO_BENEFITS, DEFAULT_CATALOG, OffsetCatalog, OffsetSelector


@pytest.fixture
def selector():
    return OffsetSelector()


class TestCatalog:
    """Default provider catalog."""

    def test_default_providers(self):
        ids = [p.id for p in DEFAULT_CATALOG.providers()]
        assert ids == ["gold_standard", "verra_vcs", "american_carbon", "plan_vivo", "climate_action"]

    def test_lookup(self):
        plan_vivo = DEFAULT_CATALOG.get("plan_vivo")
        assert plan_vivo.price_per_ton == 12.80
        assert plan_vivo.type is OffsetType.COMMUNITY_FORESTRY
        assert plan_vivo.tons_available == 6000
        assert DEFAULT_CATALOG.get("nope") is None

    def test_duplicate_ids_rejected(self):
        provider = DEFAULT_CATALOG.get("verra_vcs")
        with pytest.raises(ValueError):
            OffsetCatalog([provider, provider])

    def test_co_benefits_cover_every_type(self):
        assert set(CO_BENEFITS) == set(OffsetType)


class TestSelection:
    """Quoting, budget filtering and ranking."""

    def test_budget_keeps_affordable_options(self, selector):
        selection = selector.select_offsets(100, budget=1300)

        assert [q.id for q in selection.options] == ["plan_vivo"]
        assert selection.recommended.id == "plan_vivo"
        assert selection.recommended.total_cost == 1280.0
        assert selection.budget_feasible is True
        assert selection.budget == 1300.0

    def test_no_budget_ranks_by_rating(self, selector):
        selection = selector.select_offsets(100)

        assert [q.id for q in selection.options] == [
            "american_carbon", "gold_standard", "climate_action", "verra_vcs", "plan_vivo",
        ]
        assert selection.recommended.id == "american_carbon"
        assert selection.budget is None

    def test_total_costs(self, selector):
        costs = {q.id: q.total_cost for q in selector.select_offsets(100).options}
        assert costs == {
            "gold_standard": 1850.0,
            "verra_vcs": 1520.0,
            "american_carbon": 2200.0,
            "plan_vivo": 1280.0,
            "climate_action": 1950.0,
        }

    def test_total_cost_rounding(self, selector):
        selection = selector.select_offsets(0.3333)
        verra = next(q for q in selection.options if q.id == "verra_vcs")
        assert verra.total_cost == 5.07

    def test_market_price_range_uses_all_quotes(self, selector):
        selection = selector.select_offsets(100, budget=1300)

        assert selection.market_price_range.min == 1280.0
        assert selection.market_price_range.max == 2200.0
        assert selection.market_price_range.average == 1760.0

    def test_market_average_is_whole(self, selector):
        # quotes 6.17, 5.07, 7.33, 4.27, 6.50 average 5.868
        selection = selector.select_offsets(0.3333)
        assert selection.market_price_range.average == 6.0
        assert selection.market_price_range.min == 4.27

    def test_infeasible_budget(self, selector, caplog):
        with caplog.at_level(logging.WARNING, logger="esg_engine.offsets"):
            selection = selector.select_offsets(100, budget=100)

        assert selection.budget_feasible is False
        assert len(selection.options) == 5
        assert selection.recommended.id == "american_carbon"
        assert "No offset provider fits budget" in caplog.text

    def test_zero_budget_is_a_real_cap(self, selector):
        assert selector.select_offsets(100, budget=0).budget_feasible is False
        assert selector.select_offsets(0, budget=0).budget_feasible is True

    def test_zero_emissions(self, selector):
        selection = selector.select_offsets(0)
        assert all(q.total_cost == 0 for q in selection.options)

    def test_negative_emissions_rejected(self, selector):
        with pytest.raises(InvalidConsumption):
            selector.select_offsets(-1)

    @pytest.mark.parametrize("tons", [float("nan"), float("inf"), "abc", None, True])
    def test_unusable_emissions_rejected(self, selector, tons):
        with pytest.raises(InvalidConsumption) as exc_info:
            selector.select_offsets(tons)
        assert exc_info.value.context["field"] == "emissions_tons"

    @pytest.mark.parametrize("budget", [float("nan"), float("inf"), "abc", -5])
    def test_unusable_budget_rejected(self, selector, budget):
        with pytest.raises(InvalidConsumption) as exc_info:
            selector.select_offsets(100, budget=budget)
        assert exc_info.value.context["field"] == "budget"

    def test_numeric_string_inputs(self, selector):
        selection = selector.select_offsets("100", budget="1300")
        assert selection.recommended.id == "plan_vivo"
        assert selection.emissions_to_offset == 100.0

    def test_quote_details(self, selector):
        verra = next(q for q in selector.select_offsets(10).options if q.id == "verra_vcs")
        assert verra.co_benefits == ["Biodiversity", "Local communities"]
        assert verra.verification == "Third-party verified"
        assert verra.location == "Amazon"

    def test_equal_ratings_keep_catalog_order(self):
        catalog = OffsetCatalog([
            OffsetProvider(id="a", name="A", price_per_ton=10, type="forestry", location="X", rating=4.0),
            OffsetProvider(id="b", name="B", price_per_ton=5, type="soil_carbon", location="Y", rating=4.0),
            OffsetProvider(id="c", name="C", price_per_ton=7, type="forestry", location="Z", rating=4.5),
        ])
        selection = OffsetSelector(catalog).select_offsets(1)
        assert [q.id for q in selection.options] == ["c", "a", "b"]
