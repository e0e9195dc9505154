# -*- coding: utf-8 -*-
"""
Text insight providers.

Narrative text (report commentary, risk explanations, supplier notes) is
produced by an external generative model. The engine only sees it through
this interface and attaches the returned string verbatim; it never parses
it or lets it influence a number.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


class TextInsightProvider(ABC):
    """Source of free-form narrative text for an engine result."""

    @abstractmethod
    def generate(self, topic: str, context: Dict[str, Any]) -> Optional[str]:
        """
        Produce narrative text for a result.

        Args:
            topic: Action the text is about (e.g. ``calculate_carbon``)
            context: JSON-serializable result data

        Returns:
            Narrative text, or None when nothing is available
        """


class NullInsightProvider(TextInsightProvider):
    """Provider used when no model is configured. Never returns text."""

    def generate(self, topic: str, context: Dict[str, Any]) -> Optional[str]:
        return None


def safe_generate(
    provider: Optional[TextInsightProvider],
    topic: str,
    context: Dict[str, Any],
) -> Optional[str]:
    """Call ``provider`` and return None instead of raising."""
    if provider is None:
        return None
    try:
        text = provider.generate(topic, context)
    except Exception as exc:
        logger.warning("Insight provider failed for %s: %s", topic, exc)
        return None
    if text is not None and not isinstance(text, str):
        logger.warning(
            "Insight provider returned %s for %s, ignoring", type(text).__name__, topic
        )
        return None
    return text


__all__ = ["TextInsightProvider", "NullInsightProvider", "safe_generate"]
