# -*- coding: utf-8 -*-
"""
Calendar import (.csv / .xlsx) and weekday-template bulk generation.

Both paths funnel into ``_create_or_skip``: a duplicate check on
(organization, date, time) followed by an insert, one row at a time.
Malformed rows in an uploaded file are dropped silently; an unreadable file
is a hard ``ImportFormatError``.
"""
from __future__ import annotations

import csv
import io
import logging
import math
import re
from datetime import date, datetime, time, timedelta

from flask import current_app

from ...extensions import db
from ...errors import ImportFormatError, ValidationError
from ...models import Show
from ...validators import DATE_RE, parse_date, parse_show_time, to_hhmm

logger = logging.getLogger(__name__)

LEGACY_TIMES = {
    "matinee": "14:00",
    "evening": "19:00",
    "noon": "12:00",
    "midnight": "00:00",
}
TWELVE_HOUR_RE = re.compile(r"^(\d{1,2}):(\d{2})\s*(am|pm)$", re.IGNORECASE)

DATE_HEADERS = ("date",)
TIME_HEADERS = ("showtime", "show_time", "time", "label", "name")


# --- normalization ---

def _serial_to_hhmm(value: float) -> str | None:
    if not math.isfinite(value) or value < 0:
        return None
    fraction = value % 1 if value >= 1 else value
    total = round(fraction * 24 * 60) % (24 * 60)
    return f"{total // 60:02d}:{total % 60:02d}"


def normalize_show_time(value) -> str | None:
    """Legacy label, spreadsheet serial, 24h or 12h text -> 'HH:mm' (or None)."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        value = value.time()
    if isinstance(value, time):
        return f"{value.hour:02d}:{value.minute:02d}"

    s = str(value).strip()
    if not s:
        return None

    legacy = LEGACY_TIMES.get(s.lower())
    if legacy:
        return legacy

    # spreadsheet serials: numeric cells only
    if isinstance(value, (int, float)):
        return _serial_to_hhmm(float(value))

    hhmm = to_hhmm(s)
    if hhmm:
        return hhmm

    m = TWELVE_HOUR_RE.match(s)
    if m:
        h, mm = int(m.group(1)), int(m.group(2))
        if 1 <= h <= 12 and mm <= 59:
            ampm = m.group(3).lower()
            if ampm == "pm" and h < 12:
                h += 12
            if ampm == "am" and h == 12:
                h = 0
            return f"{h:02d}:{mm:02d}"
    return None


def normalize_show_date(value) -> date | None:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    m = DATE_RE.match(str(value or "").strip())
    if not m:
        return None
    try:
        return date(int(m.group(1)), int(m.group(2)), int(m.group(3)))
    except ValueError:
        return None


# --- file reading ---

def _pick(row: dict, aliases) -> object:
    lowered = {str(k).strip().lower(): v for k, v in row.items() if k is not None}
    for a in aliases:
        v = lowered.get(a)
        if v not in (None, ""):
            return v
    return None


def _records_from_csv(content: bytes) -> list[dict]:
    try:
        text_data = content.decode("utf-8-sig")
    except UnicodeDecodeError:
        raise ImportFormatError("Could not read the CSV file: it must be UTF-8 encoded")
    header = text_data.splitlines()[0] if text_data else ""
    delimiter = ";" if header.count(";") > header.count(",") else ","
    reader = csv.DictReader(io.StringIO(text_data), delimiter=delimiter)
    return [r for r in reader if any((v or "").strip() for v in r.values() if isinstance(v, str))]


def _records_from_xlsx(content: bytes) -> list[dict]:
    import openpyxl

    try:
        wb = openpyxl.load_workbook(io.BytesIO(content), read_only=True, data_only=True)
    except Exception as e:
        raise ImportFormatError(f"Could not read the Excel file: {e}")
    try:
        it = wb.active.iter_rows(values_only=True)
        headers = list(next(it, []) or [])
        records = []
        for r in it:
            if not r or all(c in (None, "") for c in r):
                continue
            records.append({headers[i]: r[i] for i in range(min(len(headers), len(r)))})
        return records
    finally:
        wb.close()


def read_rows(filename: str, content: bytes) -> list[dict]:
    """Parse an uploaded calendar into [{'date': date, 'showTime': 'HH:mm'}]."""
    name = (filename or "").lower()
    if name.endswith(".csv"):
        records = _records_from_csv(content)
    elif name.endswith(".xlsx"):
        records = _records_from_xlsx(content)
    else:
        raise ImportFormatError()

    rows = []
    for rec in records:
        show_date = normalize_show_date(_pick(rec, DATE_HEADERS))
        show_time = normalize_show_time(_pick(rec, TIME_HEADERS))
        if show_date is None or show_time is None:
            continue
        rows.append({"date": show_date, "showTime": show_time})
    return rows


# --- creation ---

class ImportResult:
    def __init__(self):
        self.created: list[dict] = []
        self.skipped: list[dict] = []
        # existing rows left alone when duplicates are not being skipped
        self.unchanged: list[dict] = []

    def to_dict(self) -> dict:
        return {
            "createdCount": len(self.created),
            "skippedCount": len(self.skipped),
            "unchangedCount": len(self.unchanged),
            "createdShows": self.created,
            "skippedShows": self.skipped,
            "unchangedShows": self.unchanged,
        }


def _create_or_skip(org_id: int, show_date: date, show_time: str,
                    skip_duplicates: bool, result: ImportResult) -> None:
    label = {"date": show_date.isoformat(), "showTime": show_time}
    existing = (
        db.session.query(Show.id)
        .filter(
            Show.organization_id == org_id,
            Show.date == show_date,
            Show.show_time == show_time,
        )
        .first()
    )
    if existing:
        (result.skipped if skip_duplicates else result.unchanged).append(label)
        return
    db.session.add(Show(organization_id=org_id, date=show_date, show_time=show_time))
    db.session.flush()
    result.created.append(label)


def import_rows(org_id: int, rows: list[dict], skip_duplicates: bool = True) -> ImportResult:
    result = ImportResult()
    for row in rows:
        _create_or_skip(org_id, row["date"], row["showTime"], skip_duplicates, result)
    db.session.commit()
    logger.info(
        "org=%s import: created=%d skipped=%d unchanged=%d",
        org_id, len(result.created), len(result.skipped), len(result.unchanged),
    )
    return result


def _weekday_times(raw) -> dict[int, list[str]]:
    if not isinstance(raw, dict):
        raise ValidationError("weekdayTimes must be an object keyed by weekday")
    out: dict[int, list[str]] = {}
    for key, times in raw.items():
        if not re.fullmatch(r"[0-6]", str(key)):
            raise ValidationError("Weekday keys must be 0-6 (Sunday-Saturday)")
        if not isinstance(times, list):
            raise ValidationError("weekdayTimes values must be lists of times")
        out[int(key)] = sorted({parse_show_time(t) for t in times})
    return out


def bulk_generate(org_id: int, start_raw, end_raw, weekday_times_raw,
                  skip_duplicates: bool = True) -> ImportResult:
    start = parse_date(start_raw, "startDate")
    end = parse_date(end_raw, "endDate")
    if start > end:
        raise ValidationError("Start date must be on or before end date")
    max_days = current_app.config.get("BULK_GENERATE_MAX_DAYS", 366)
    if (end - start).days + 1 > max_days:
        raise ValidationError("Date range cannot exceed 1 year")
    weekday_times = _weekday_times(weekday_times_raw)

    result = ImportResult()
    day = start
    while day <= end:
        # 0=Sunday
        for show_time in weekday_times.get((day.weekday() + 1) % 7, []):
            _create_or_skip(org_id, day, show_time, skip_duplicates, result)
        day += timedelta(days=1)
    db.session.commit()
    logger.info(
        "org=%s bulk-generate %s..%s: created=%d skipped=%d unchanged=%d",
        org_id, start, end, len(result.created), len(result.skipped), len(result.unchanged),
    )
    return result
