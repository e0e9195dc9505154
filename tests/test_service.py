# -*- coding: utf-8 -*-
"""Tests for the EsgEngineService facade and the batch processor."""

from typing import Any, Dict, Optional

import pytest

from esg_engine.batch import BatchProcessor
from esg_engine.config import EsgEngineConfig
from esg_engine.exceptions import DivisionByZero, UnknownRegion, UnsupportedAction
from esg_engine.insights import NullInsightProvider, TextInsightProvider
from esg_engine.setup import EsgEngineService, get_service, reset_service, set_service
from esg_engine.target_tracker import TargetTracker


class StaticInsights(TextInsightProvider):
    def generate(self, topic: str, context: Dict[str, Any]) -> Optional[str]:
        return f"narrative for {topic}"


class BrokenInsights(TextInsightProvider):
    def generate(self, topic: str, context: Dict[str, Any]) -> Optional[str]:
        raise RuntimeError("model unavailable")


def _carbon_params(**overrides):
    params = {
        "consumption": {"electricity_kwh": 1000, "natural_gas_m3": 200},
        "employees": 10,
        "revenue": 1_000_000,
        "region": "europe",
        "company_id": "acme",
    }
    params.update(overrides)
    return params


# ==============================================================================
# Actions
# ==============================================================================

class TestCalculateCarbon:
    """calculate_carbon action."""

    def test_reference_scenario(self, service):
        result = service.dispatch("calculate_carbon", _carbon_params())

        assert result["success"] is True
        data = result["data"]
        assert data["total_emissions_kg"] == 680.0
        assert data["per_employee"] == 68.0
        assert data["scope1"]["breakdown"]["natural_gas"] == 404.0
        assert data["factor_resolution"]["fallback_applied"] is False
        assert len(data["provenance_hash"]) == 64
        assert len(result["provenance_hash"]) == 64

    def test_region_fallback_is_reported(self, service):
        data = service.dispatch("calculate_carbon", _carbon_params(region="oceania"))["data"]

        assert data["region"] == "europe"
        assert data["factor_resolution"] == {
            "region_requested": "oceania",
            "region_used": "europe",
            "fallback_applied": True,
        }

    def test_strict_regions(self, provenance):
        strict = EsgEngineService(
            config=EsgEngineConfig(strict_regions=True), provenance=provenance,
        )
        with pytest.raises(UnknownRegion):
            strict.dispatch("calculate_carbon", _carbon_params(region="oceania"))

    def test_company_id_from_context(self, service, provenance):
        params = _carbon_params()
        del params["company_id"]
        service.dispatch("calculate_carbon", params, context={"company_id": "globex"})

        assert len(provenance.get_chain("emissions_report", "globex")) == 1

    def test_errors_propagate(self, service):
        with pytest.raises(DivisionByZero):
            service.dispatch("calculate_carbon", _carbon_params(employees=0))

        assert service.get_stats()["errors"] == 1
        assert service.get_stats()["calculate_carbon"] == 0


class TestOtherActions:
    """Remaining named actions."""

    def test_track_targets(self, service):
        result = service.dispatch("track_targets", {
            "targets": [
                {"name": "co2", "baseline": 100, "target": 0, "current": 60, "deadline": "2030-01-01"},
                {"name": "flat", "baseline": 5, "target": 5, "current": 5, "deadline": "2030-01-01"},
            ],
            "now": "2025-01-01T00:00:00Z",
        })

        data = result["data"]
        assert data["targets"][0]["progress_percent"] == 40
        assert data["targets"][0]["expected_progress_percent"] == 50
        assert data["targets"][0]["deadline"] == "2030-01-01"
        assert data["summary"]["at_risk"] == 1
        assert data["errors"][0]["item"] == "flat"

    def test_get_offset_options(self, service):
        data = service.dispatch("get_offset_options", {"emissions": 100, "budget": 1300})["data"]

        assert data["recommended"]["id"] == "plan_vivo"
        assert data["options"][0]["type"] == "community_forestry"

    def test_get_benchmarks_defaults_to_technology(self, service):
        data = service.dispatch("get_benchmarks", {})["data"]

        assert data["industry"] == "technology"
        assert data["benchmark"]["environmental"] == 72
        assert data["market_average"] == {"environmental": 57, "social": 64, "governance": 70}

    def test_assess_esg_risk(self, service):
        data = service.dispatch("assess_esg_risk", {
            "scores": {"environmental": 50, "social": 70, "governance": 85},
            "industry": "finance",
        })["data"]

        assert data["comparison"]["vs_industry_environmental"] == -19
        assert data["comparison"]["vs_industry_governance"] == 3
        assert data["underperforming"] == ["environmental"]

    def test_analyze_supply_chain(self, service):
        data = service.dispatch("analyze_supply_chain", {
            "suppliers": [{"name": "Acme", "spend": 10, "country": "FR"}],
        })["data"]

        assert data["total_suppliers"] == 1
        assert data["geographic_distribution"] == ["FR"]

    def test_unsupported_action(self, service):
        with pytest.raises(UnsupportedAction) as exc_info:
            service.dispatch("generate_report", {})

        assert exc_info.value.context["action"] == "generate_report"
        assert "calculate_carbon" in exc_info.value.context["supported"]


# ==============================================================================
# Provenance, insights, lifecycle
# ==============================================================================

class TestServiceAmbient:
    """Provenance, narrative text, stats and singletons."""

    def test_every_action_records_provenance(self, service, provenance):
        service.dispatch("calculate_carbon", _carbon_params())
        service.dispatch("get_offset_options", {"emissions_tons": 1})
        service.dispatch("get_benchmarks", {"industry": "retail"})

        assert provenance.entry_count == 3
        assert provenance.verify_chain()[0] is True

    def test_provenance_disabled(self, provenance):
        svc = EsgEngineService(
            config=EsgEngineConfig(enable_provenance=False), provenance=provenance,
        )
        svc.dispatch("get_benchmarks", {})
        assert provenance.entry_count == 0

    def test_identical_inputs_same_hash(self, service):
        first = service.dispatch("get_offset_options", {"emissions_tons": 12})
        second = service.dispatch("get_offset_options", {"emissions_tons": 12})
        assert first["provenance_hash"] == second["provenance_hash"]

    def test_null_insights_add_nothing(self, service):
        assert isinstance(service.insight_provider, NullInsightProvider)
        assert "narrative" not in service.dispatch("get_benchmarks", {})

    def test_narrative_attached_verbatim(self, provenance):
        svc = EsgEngineService(insight_provider=StaticInsights(), provenance=provenance)
        result = svc.dispatch("get_benchmarks", {})
        assert result["narrative"] == "narrative for get_benchmarks"

    def test_failing_provider_does_not_fail_action(self, provenance):
        svc = EsgEngineService(insight_provider=BrokenInsights(), provenance=provenance)
        result = svc.dispatch("calculate_carbon", _carbon_params())

        assert result["success"] is True
        assert "narrative" not in result
        assert result["data"]["total_emissions_kg"] == 680.0

    def test_stats(self, service):
        service.dispatch("get_benchmarks", {})
        service.dispatch("get_benchmarks", {})
        stats = service.get_stats()

        assert stats["get_benchmarks"] == 2
        assert stats["provenance_entries"] == 2

    def test_health(self, service):
        health = service.health_check()
        assert health["status"] == "healthy"
        assert health["offset_providers"] == 5
        service.shutdown()
        assert service.health_check()["status"] == "starting"

    def test_singleton(self, service):
        assert get_service() is get_service()
        set_service(service)
        assert get_service() is service
        fresh = reset_service()
        assert fresh is not service
        assert get_service() is fresh


# ==============================================================================
# Batch processing
# ==============================================================================

class TestBatch:
    """Thread-pool batch runs with error isolation."""

    def test_calculate_batch(self, service):
        result = service.calculate_carbon_batch([
            _carbon_params(company_id="a"),
            _carbon_params(company_id="b", employees=0),
            _carbon_params(company_id="c", region="asia"),
        ])

        assert result.successful_count == 2
        assert result.failed_count == 1
        assert result.reports[1] is None
        assert result.reports[0].total_emissions_kg == 680.0
        assert result.reports[2].region == "asia"
        assert result.errors[0].index == 1
        assert result.errors[0].item == "b"
        assert result.errors[0].error_code == "ESG_DIVISION_BY_ZERO"
        assert result.total_emissions_kg == pytest.approx(
            680.0 + result.reports[2].total_emissions_kg
        )

    def test_batch_to_dict(self, service):
        result = service.calculate_carbon_batch([_carbon_params()])
        payload = result.to_dict()
        assert payload["successful_count"] == 1
        assert payload["reports"][0]["total_emissions_kg"] == 680.0

    def test_batch_through_dispatch(self, service, provenance):
        result = service.dispatch("calculate_carbon_batch", {
            "requests": [_carbon_params(company_id="a"), _carbon_params(company_id="b", revenue=0)],
        })

        data = result["data"]
        assert data["successful_count"] == 1
        assert data["failed_count"] == 1
        assert data["reports"][1] is None
        assert data["errors"][0]["error_code"] == "ESG_DIVISION_BY_ZERO"
        assert service.get_stats()["calculate_carbon_batch"] == 1
        assert len(provenance.get_chain("emissions_batch", "anonymous")) == 1

    def test_track_targets_batch_matches_sequential(self, epoch):
        targets = [
            {"name": f"t{i}", "baseline": 100, "target": 0, "current": 100 - i * 10,
             "deadline": "2030-01-01"}
            for i in range(8)
        ]
        targets.insert(3, {"name": "broken", "baseline": 1, "target": 1, "current": 1,
                           "deadline": "2030-01-01"})
        tracker = TargetTracker()

        parallel = BatchProcessor(tracker=tracker, max_workers=4).track_targets_batch(targets, epoch)
        sequential = tracker.track_all(targets, epoch)

        assert parallel == sequential
        assert [e.index for e in parallel.errors] == [3]
