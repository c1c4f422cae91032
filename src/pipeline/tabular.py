"""Heuristic CSV reader for Samsung Health export tables.

Export files start with one or more metadata lines (package name, row
count, schema version) before the real header, and the column count of data
rows drifts between app versions. The reader therefore:

  * hunts for the header in the first HEADER_SCAN_LINES lines,
  * splits fields with a small quote-aware scanner,
  * drops rows that are shorter than the header and ignores extra fields.

No numeric coercion happens here; consumers coerce what they need.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from constants import HEADER_KEYWORDS, HEADER_MIN_FIELDS, HEADER_SCAN_LINES
from models import RawRecord

log = logging.getLogger("pipeline.tabular")


def _clean_field(raw: str) -> str:
    text = raw.strip()
    if text.startswith('"'):
        text = text[1:]
    if text.endswith('"'):
        text = text[:-1]
    return text.replace('""', '"')


def split_fields(line: str, delimiter: str = ",") -> List[str]:
    '''Split one line, keeping delimiters inside quoted text literal.

    >>> split_fields('a,"b,c",d')
    ['a', 'b,c', 'd']
    >>> split_fields('"he said ""hi"""')
    ['he said "hi"']
    '''
    fields: List[str] = []
    current: List[str] = []
    in_quotes = False
    for ch in line:
        if ch == '"':
            in_quotes = not in_quotes
            current.append(ch)
        elif ch == delimiter and not in_quotes:
            fields.append(_clean_field("".join(current)))
            current = []
        else:
            current.append(ch)
    fields.append(_clean_field("".join(current)))
    return fields


def detect_header(lines: List[str]) -> Optional[int]:
    """Return the index of the header line, or None if nothing qualifies."""
    for idx, line in enumerate(lines[:HEADER_SCAN_LINES]):
        if len(split_fields(line)) <= HEADER_MIN_FIELDS:
            continue
        low = line.lower()
        if any(k in low for k in HEADER_KEYWORDS):
            return idx

    for idx, line in enumerate(lines):
        if len(split_fields(line)) > HEADER_MIN_FIELDS:
            return idx
    return None


def parse_records(text: str, file_name: str = "") -> List[RawRecord]:
    """Parse one delimited blob into RawRecords (empty list if no header)."""
    lines = text.replace("\r\n", "\n").replace("\r", "\n").split("\n")
    if len(lines) < 2:
        return []

    header_idx = detect_header(lines)
    if header_idx is None:
        log.debug("No header found in %s", file_name or "<text>")
        return []

    headers = split_fields(lines[header_idx])
    records: List[RawRecord] = []
    dropped = 0
    for line in lines[header_idx + 1:]:
        line = line.strip()
        if not line:
            continue
        values = split_fields(line)
        if len(values) < len(headers):
            dropped += 1
            continue
        records.append(RawRecord(dict(zip(headers, values)), file_name))

    if dropped:
        log.debug("Dropped %d short rows from %s", dropped, file_name or "<text>")
    return records
