"""Sleep session reconciliation.

Samsung Health exports the same night several times: once per sensor
(phone, watch) and once as a cross-sensor "combined" summary, each with its
own idea of duration. This module turns raw rows into local-time sessions and
keeps one session per night.

Dedup is a deterministic greedy cover, NOT optimal interval scheduling:
candidates are ranked (combined first, then longest asleep time) and a
candidate is dropped when any already-kept session covers more than
DEDUP_OVERLAP_RATIO of the candidate's own asleep minutes. Personal records
and sleep totals depend on which sessions survive, so keep the ranking as is.
"""

from __future__ import annotations

import logging
from datetime import timedelta
from typing import Iterable, List, Optional

from constants import (
    DEDUP_OVERLAP_RATIO,
    MINUTES_PER_DAY,
    MS_PER_MINUTE,
    SLEEP_DURATION_FIELDS,
    SLEEP_EFFICIENCY_FIELDS,
    SLEEP_END_FIELDS,
    SLEEP_OFFSET_FIELDS,
    SLEEP_SCORE_FIELDS,
    SLEEP_START_FIELDS,
    SPAN_MATCH_TOLERANCE_MIN,
)
from models import RawRecord, SleepSession
from pipeline.fields import parse_offset_minutes, parse_utc

log = logging.getLogger("pipeline.sleep")


def normalize_efficiency(value: float) -> float:
    """Fractions (0, 1] become percentages; everything else is kept."""
    if 0 < value <= 1:
        return value * 100
    return value


def resolve_asleep_minutes(raw_duration: float, span: Optional[float],
                           efficiency: float, is_combined: bool) -> float:
    """Turn a raw duration into minutes actually asleep.

    Combined summaries already report asleep time. Single-sensor rows whose
    wall-clock span equals the duration are reporting time in bed, so the
    efficiency percentage is applied.
    """
    if is_combined:
        return raw_duration
    if span is None or not (0 < efficiency < 100):
        return raw_duration
    if abs(span - raw_duration) < SPAN_MATCH_TOLERANCE_MIN:
        return raw_duration * (efficiency / 100)
    return raw_duration


def session_from_record(record: RawRecord) -> Optional[SleepSession]:
    """Build one local-time session, or None when the row is unusable."""
    offset = timedelta(minutes=parse_offset_minutes(record.first(SLEEP_OFFSET_FIELDS)))
    is_combined = "combined" in record.file_name.lower()

    start = parse_utc(record.first(SLEEP_START_FIELDS))
    if start is None:
        return None
    end = parse_utc(record.first(SLEEP_END_FIELDS))

    raw_duration = record.first_number(SLEEP_DURATION_FIELDS)
    if raw_duration > MINUTES_PER_DAY:
        raw_duration = raw_duration / MS_PER_MINUTE

    local_start = (start + offset).replace(tzinfo=None)
    span: Optional[float] = None
    if end is None or end <= start:
        local_end = local_start + timedelta(minutes=raw_duration)
    else:
        local_end = (end + offset).replace(tzinfo=None)
        span = (end - start).total_seconds() / 60
        if raw_duration == 0:
            raw_duration = span

    efficiency = normalize_efficiency(record.first_number(SLEEP_EFFICIENCY_FIELDS))
    score = record.first_number(SLEEP_SCORE_FIELDS)

    asleep = resolve_asleep_minutes(raw_duration, span, efficiency, is_combined)
    if asleep <= 0:
        return None

    return SleepSession(
        start=local_start,
        end=local_end,
        duration=asleep,
        efficiency=efficiency,
        score=score,
        is_combined=is_combined,
    )


def overlap_minutes(a: SleepSession, b: SleepSession) -> float:
    """Minutes of intersection between two [start, end) ranges."""
    latest_start = max(a.start, b.start)
    earliest_end = min(a.end, b.end)
    return max(0.0, (earliest_end - latest_start).total_seconds() / 60)


def dedupe_sessions(sessions: Iterable[SleepSession]) -> List[SleepSession]:
    """Greedy cover: keep higher-priority sessions, drop ones they encapsulate."""
    ranked = sorted(sessions, key=lambda s: (not s.is_combined, -s.duration))
    kept: List[SleepSession] = []
    for candidate in ranked:
        covered = any(
            overlap_minutes(candidate, k) / candidate.duration > DEDUP_OVERLAP_RATIO
            for k in kept
        )
        if not covered:
            kept.append(candidate)
    return kept


def reconcile_sleep(records: Iterable[RawRecord]) -> List[SleepSession]:
    """Raw sleep rows → final de-duplicated session list."""
    candidates: List[SleepSession] = []
    dropped = 0
    for record in records:
        session = session_from_record(record)
        if session is None:
            dropped += 1
            continue
        candidates.append(session)

    kept = dedupe_sessions(candidates)
    log.info(
        "Sleep: %d candidates, %d duplicates removed, %d unusable rows",
        len(candidates), len(candidates) - len(kept), dropped,
    )
    return kept
