# -*- coding: utf-8 -*-
"""
Action audit log for the ESG engine.

The service appends one entry per completed action. An entry stores the
SHA-256 of the action output plus a link hash over the previous entry, so
editing or dropping any earlier entry breaks ``verify_chain``.

    >>> tracker = ProvenanceTracker("tenant-a")
    >>> link = tracker.record("emissions_report", "acme", "calculate_carbon", "abc123")
    >>> tracker.verify_chain()[0]
    True
"""

from __future__ import annotations

import hashlib
import json
import logging
import math
import threading
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple

from esg_engine.config import get_config

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(microsecond=0)


def _canonical(value: Any) -> Any:
    """JSON-safe form with sorted keys and floats cut to 10 places."""
    if hasattr(value, "model_dump"):
        return _canonical(value.model_dump(mode="json"))
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, float):
        if math.isnan(value) or math.isinf(value):
            return repr(value)
        return round(value, 10)
    if isinstance(value, dict):
        return {str(k): _canonical(v) for k, v in sorted(value.items(), key=lambda kv: str(kv[0]))}
    if isinstance(value, (list, tuple)):
        return [_canonical(v) for v in value]
    return value


def compute_hash(data: Any) -> str:
    """SHA-256 hex digest of ``data`` in canonical JSON form."""
    payload = json.dumps(_canonical(data), sort_keys=True, default=str)
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


def _link(parent_hash: str, action: str, data_hash: str, timestamp: str) -> str:
    return hashlib.sha256(
        "|".join((parent_hash, action, data_hash, timestamp)).encode("utf-8")
    ).hexdigest()


class ProvenanceTracker:
    """Append-only chain of action entries.

    Entries live in one global chain and are also indexed by
    ``entity_type:entity_id``. The genesis hash is the SHA-256 of
    ``genesis_seed`` (configured ``genesis_hash`` when None).
    """

    def __init__(self, genesis_seed: Optional[str] = None) -> None:
        seed = genesis_seed if genesis_seed is not None else get_config().genesis_hash
        self.genesis_hash: str = hashlib.sha256(seed.encode("utf-8")).hexdigest()
        self._by_entity: Dict[str, List[Dict[str, Any]]] = {}
        self._entries: List[Dict[str, Any]] = []
        self._head: str = self.genesis_hash
        self._lock = threading.Lock()
        logger.info("ProvenanceTracker ready (genesis=%s)", self.genesis_hash[:12])

    def record_operation(
        self,
        entity_type: str,
        entity_id: str,
        action: str,
        data_hash: str,
    ) -> str:
        """Append an entry for ``action`` on an entity and return its chain hash."""
        timestamp = _utcnow().isoformat()

        with self._lock:
            parent_hash = self._head
            entry = {
                "entity_type": entity_type,
                "entity_id": entity_id,
                "action": action,
                "data_hash": data_hash,
                "timestamp": timestamp,
                "parent_hash": parent_hash,
                "chain_hash": _link(parent_hash, action, data_hash, timestamp),
            }
            self._by_entity.setdefault(f"{entity_type}:{entity_id}", []).append(entry)
            self._entries.append(entry)
            self._head = entry["chain_hash"]

        logger.debug(
            "Provenance %s %s/%s -> %s",
            action, entity_type, entity_id, entry["chain_hash"][:16],
        )
        return entry["chain_hash"]

    record = record_operation

    def verify_chain(self) -> Tuple[bool, List[Dict[str, Any]]]:
        """Walk the chain from genesis; returns ``(valid, entries)``."""
        with self._lock:
            chain = [dict(entry) for entry in self._entries]

        parent = self.genesis_hash
        for i, entry in enumerate(chain):
            link = _link(parent, entry["action"], entry["data_hash"], entry["timestamp"])
            if entry["parent_hash"] != parent or entry["chain_hash"] != link:
                logger.warning("Provenance chain broken at entry %d", i)
                return False, chain
            parent = entry["chain_hash"]
        return True, chain

    def get_chain(
        self,
        entity_type: Optional[str] = None,
        entity_id: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        """Entries for one entity when both keys are given, else the whole chain."""
        with self._lock:
            if entity_type and entity_id:
                return list(self._by_entity.get(f"{entity_type}:{entity_id}", []))
            return list(self._entries)

    def get_latest_hash(self) -> str:
        with self._lock:
            return self._head

    def reset(self) -> None:
        with self._lock:
            self._by_entity.clear()
            self._entries.clear()
            self._head = self.genesis_hash
        logger.info("ProvenanceTracker reset to genesis")

    def export_json(self) -> str:
        with self._lock:
            entries = list(self._entries)
        return json.dumps(entries, indent=2, default=str)

    @property
    def entry_count(self) -> int:
        with self._lock:
            return len(self._entries)


# ---------------------------------------------------------------------------
# Thread-safe singleton
# ---------------------------------------------------------------------------

_tracker_instance: Optional[ProvenanceTracker] = None
_tracker_lock = threading.Lock()


def get_provenance_tracker() -> ProvenanceTracker:
    """Return the process-wide ProvenanceTracker, creating it on first use."""
    global _tracker_instance
    if _tracker_instance is None:
        with _tracker_lock:
            if _tracker_instance is None:
                _tracker_instance = ProvenanceTracker()
    return _tracker_instance


def reset_provenance_tracker() -> None:
    """Drop the singleton so the next call builds a fresh tracker."""
    global _tracker_instance
    with _tracker_lock:
        _tracker_instance = None


__all__ = [
    "ProvenanceTracker",
    "compute_hash",
    "get_provenance_tracker",
    "reset_provenance_tracker",
]
