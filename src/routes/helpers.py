"""
Shared helpers for API routes and the CLI.
Contains: JSON coercion and result-mapping serialization.
"""

from __future__ import annotations

import logging
import math
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, Mapping, Optional

from models import YearStats

log = logging.getLogger("api")


# ─── Type coercion ──────────────────────────────────────────

def _to_jsonable(value: Any) -> Any:
    if isinstance(value, dict):
        return {k: _to_jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_to_jsonable(v) for v in value]
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, float) and not math.isfinite(value):
        return None
    return value


# ─── Result payloads ────────────────────────────────────────

def serialize_results(results: Mapping[str, YearStats],
                      year: Optional[str] = None) -> Dict[str, Any]:
    """Year → YearStats mapping as ``{"years": [...], "stats": {...}}``.

    Key order is preserved, so "All Time" stays last. With *year* set only
    that entry is kept; an unknown year raises KeyError.
    """
    if year is not None:
        results = {year: results[year]}
    stats = {key: _to_jsonable(value.to_dict()) for key, value in results.items()}
    log.debug("Serialized %d year entries", len(stats))
    return {"years": list(stats), "stats": stats}
