"""
Encoding and decoding of the per-tenant RSVP CSV file
"""

import csv
import logging
import re
from typing import Dict, Iterable, List, Optional, TextIO

from pydantic import ValidationError

from app.schemas.guest import GuestRecord

logger = logging.getLogger(__name__)

# (header title, record field) in file order
COLUMNS = [
    ("ID", "id"),
    ("Name", "name"),
    ("Relationship", "relationship"),
    ("Attendance", "attendance"),
    ("Message", "message"),
    ("Submitted At", "submitted_at"),
]

HEADER_LINE = ",".join(title for title, _ in COLUMNS)

REQUIRED_FIELDS = ("id", "name", "relationship", "attendance", "submitted_at")

# Older files labelled the relationship column "Position"
LEGACY_HEADERS = {"position": "relationship"}

# Files are opened with errors="surrogateescape"; bytes that are not UTF-8
# surface as lone surrogates in this range
UNDECODABLE = re.compile("[\udc80-\udcff]")

_HEADER_TO_FIELD = {title.lower(): field for title, field in COLUMNS}
_HEADER_TO_FIELD.update(LEGACY_HEADERS)


def escape_field(value: Optional[object]) -> str:
    """Quote a field when it holds a separator, quote, line break or edge whitespace"""
    text = "" if value is None else str(value)
    if (
        "," in text
        or '"' in text
        or "\n" in text
        or "\r" in text
        or text != text.strip()
    ):
        return '"' + text.replace('"', '""') + '"'
    return text


def format_record(record: GuestRecord) -> str:
    values = []
    for _, field in COLUMNS:
        value = getattr(record, field)
        if field == "attendance" and value is not None:
            value = value.value
        values.append(escape_field(value))
    return ",".join(values) + "\n"


def format_file(records: Iterable[GuestRecord]) -> str:
    return HEADER_LINE + "\n" + "".join(format_record(r) for r in records)


def map_header(header: List[str]) -> List[Optional[str]]:
    """Map header titles to record fields; unknown columns map to None"""
    return [_HEADER_TO_FIELD.get(title.strip().lower()) for title in header]


def parse_row(fields: List[Optional[str]], row: List[str]) -> Optional[GuestRecord]:
    """Build a record from one data row, or None when the row is unusable"""
    values: Dict[str, str] = {}
    for field, value in zip(fields, row):
        if field is not None and field not in values:
            values[field] = value

    missing = [f for f in REQUIRED_FIELDS if not values.get(f, "").strip()]
    if missing:
        return None

    try:
        return GuestRecord(**values)
    except ValidationError:
        return None


def read_records(handle: TextIO, source: str = "<csv>") -> List[GuestRecord]:
    """Parse an open RSVP file, skipping malformed lines"""
    reader = csv.reader(handle)
    header = next(reader, None)
    if not header:
        return []

    fields = map_header(header)
    records: List[GuestRecord] = []
    for row in reader:
        if not row or all(not cell.strip() for cell in row):
            continue
        record = None if any(UNDECODABLE.search(cell) for cell in row) else parse_row(fields, row)
        if record is None:
            logger.warning(f"Skipping malformed RSVP line {reader.line_num} in {source}")
            continue
        records.append(record)
    return records
