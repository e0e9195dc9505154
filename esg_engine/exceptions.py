# -*- coding: utf-8 -*-
"""
ESG Engine Exception Hierarchy

Every calculation error raised by the engine derives from ``EsgEngineError``
and carries a machine-readable error code plus a context dictionary, so the
request boundary can serialize it without inspecting the message text.

Taxonomy:
    - InvalidConsumption: negative, NaN or infinite consumption quantity
    - UnknownRegion: region key not registered (strict mode only)
    - InvalidTargetDefinition: baseline == target, or malformed dates
    - DivisionByZero: employees or revenue <= 0
    - InfeasibleBudget: no offset fits the budget (strict callers only)
    - InvalidScores: assessed ESG scores missing or out of range
    - UnsupportedAction: unknown action name at the service facade

All of these are local and recoverable at the call site.
"""

from __future__ import annotations

import json
import re
import traceback
from datetime import datetime, timezone
from typing import Any, Dict, Optional


def _error_code_for(cls_name: str) -> str:
    """Build ``ESG_SNAKE_CASE`` code from a class name."""
    snake = re.sub(r"(?<!^)(?=[A-Z])", "_", cls_name).upper()
    return f"ESG_{snake}"


class EsgEngineError(Exception):
    """Base exception for all ESG engine errors.

    Attributes:
        message: Human-readable error message.
        error_code: Stable code, auto-generated from the class name.
        context: Structured details (field names, offending values).
        timestamp: UTC time the error was raised.
    """

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.error_code = error_code or _error_code_for(type(self).__name__)
        self.context = context or {}
        self.timestamp = datetime.now(timezone.utc)

    def __str__(self) -> str:
        return f"[{self.error_code}] {self.message}"

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "error_type": type(self).__name__,
            "error_code": self.error_code,
            "message": self.message,
            "context": self.context,
            "timestamp": self.timestamp.isoformat(),
            "traceback": "".join(
                traceback.format_exception(type(self), self, self.__traceback__)
            ),
        }

    def to_json(self) -> str:
        """Serialize to JSON string."""
        return json.dumps(self.to_dict(), default=str)


class InvalidConsumption(EsgEngineError):
    """A consumption quantity is negative or not a finite number."""


class UnknownRegion(EsgEngineError):
    """The requested region has no registered emission factor set."""


class InvalidTargetDefinition(EsgEngineError):
    """A reduction target cannot be tracked (baseline == target, bad dates)."""


class DivisionByZero(EsgEngineError):
    """An intensity metric would divide by a non-positive denominator."""


class InfeasibleBudget(EsgEngineError):
    """No offset provider fits within the requested budget."""


class InvalidScores(EsgEngineError):
    """Assessed ESG scores are missing or outside 0-100."""


class UnsupportedAction(EsgEngineError):
    """The service facade received an unknown action name."""


def format_exception_chain(exc: BaseException) -> str:
    """Format exception chain for logging/display.

    Args:
        exc: Exception to format

    Returns:
        Formatted string with full exception chain
    """
    lines = []
    current: Optional[BaseException] = exc

    while current is not None:
        if isinstance(current, EsgEngineError):
            lines.append(str(current))
            lines.append(f"  Context: {current.context}")
        else:
            lines.append(f"{type(current).__name__}: {current}")

        current = getattr(current, "__cause__", None)

    return "\n".join(lines)


__all__ = [
    "EsgEngineError",
    "InvalidConsumption",
    "UnknownRegion",
    "InvalidTargetDefinition",
    "DivisionByZero",
    "InfeasibleBudget",
    "InvalidScores",
    "UnsupportedAction",
    "format_exception_chain",
]
