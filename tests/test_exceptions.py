# -*- coding: utf-8 -*-
"""Tests for the engine exception hierarchy."""

import json

import pytest

from esg_engine.exceptions import (
    DivisionByZero,
    EsgEngineError,
    InfeasibleBudget,
    InvalidConsumption,
    InvalidScores,
    InvalidTargetDefinition,
    UnknownRegion,
    UnsupportedAction,
    format_exception_chain,
)


class TestErrorCodes:
    """Codes derived from class names."""

    @pytest.mark.parametrize("cls,code", [
        (InvalidConsumption, "ESG_INVALID_CONSUMPTION"),
        (UnknownRegion, "ESG_UNKNOWN_REGION"),
        (InvalidTargetDefinition, "ESG_INVALID_TARGET_DEFINITION"),
        (DivisionByZero, "ESG_DIVISION_BY_ZERO"),
        (InfeasibleBudget, "ESG_INFEASIBLE_BUDGET"),
        (InvalidScores, "ESG_INVALID_SCORES"),
        (UnsupportedAction, "ESG_UNSUPPORTED_ACTION"),
    ])
    def test_code(self, cls, code):
        err = cls("boom")
        assert err.error_code == code
        assert isinstance(err, EsgEngineError)

    def test_explicit_code(self):
        assert EsgEngineError("boom", error_code="CUSTOM").error_code == "CUSTOM"

    def test_str(self):
        assert str(DivisionByZero("employees must be positive")) == (
            "[ESG_DIVISION_BY_ZERO] employees must be positive"
        )


class TestSerialization:
    """to_dict / to_json."""

    def test_to_dict(self):
        err = UnknownRegion("no factors for oceania", context={"region": "oceania"})
        data = err.to_dict()

        assert data["error_type"] == "UnknownRegion"
        assert data["message"] == "no factors for oceania"
        assert data["context"] == {"region": "oceania"}
        assert "timestamp" in data

    def test_to_json(self):
        err = InvalidConsumption("negative", context={"value": -1})
        assert json.loads(err.to_json())["context"]["value"] == -1

    def test_context_defaults_to_empty(self):
        assert EsgEngineError("boom").context == {}


class TestExceptionChain:
    """format_exception_chain."""

    def test_chain(self):
        try:
            try:
                int("x")
            except ValueError as cause:
                raise InvalidTargetDefinition("bad deadline", context={"deadline": "x"}) from cause
        except InvalidTargetDefinition as err:
            text = format_exception_chain(err)

        lines = text.splitlines()
        assert lines[0] == "[ESG_INVALID_TARGET_DEFINITION] bad deadline"
        assert "deadline" in lines[1]
        assert lines[2].startswith("ValueError:")

    def test_plain_exception(self):
        assert format_exception_chain(RuntimeError("x")) == "RuntimeError: x"
