# -*- coding: utf-8 -*-
from __future__ import annotations

import re
from datetime import date

from flask import request

from .errors import ValidationError

DATE_RE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")
SHOW_TIME_RE = re.compile(r"^(\d{1,2}):(\d{2})(?::(\d{2}))?$")


def json_body() -> dict:
    try:
        payload = request.get_json(force=True, silent=False)
    except Exception:
        raise ValidationError("Request body must be JSON")
    if not isinstance(payload, dict):
        raise ValidationError("Request body must be a JSON object")
    return payload


def parse_date(value, field: str = "date") -> date:
    m = DATE_RE.match(str(value or "").strip())
    if not m:
        raise ValidationError(f"{field} must be YYYY-MM-DD")
    try:
        return date(int(m.group(1)), int(m.group(2)), int(m.group(3)))
    except ValueError:
        raise ValidationError(f"{field} is not a valid date")


def to_hhmm(value: str) -> str | None:
    """'9:05' / '09:05:00' -> '09:05'; None when not a 24-hour time."""
    m = SHOW_TIME_RE.match(str(value or "").strip())
    if not m:
        return None
    h, mm = int(m.group(1)), int(m.group(2))
    if h > 23 or mm > 59:
        return None
    return f"{h:02d}:{mm:02d}"


def parse_show_time(value, field: str = "showTime") -> str:
    hhmm = to_hhmm(value) if isinstance(value, str) else None
    if hhmm is None:
        raise ValidationError(f"{field} must be HH:mm or HH:mm:ss")
    return hhmm


def as_id(value) -> int | None:
    """Integer or digit-only string -> int; anything else (floats, bools) -> None."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        s = value.strip()
        if s.isascii() and s.isdigit():
            return int(s)
    return None


def parse_id(value, field: str) -> int:
    ident = as_id(value)
    if ident is None:
        raise ValidationError(f"{field} is required")
    return ident


def parse_flag(value, default: bool = True) -> bool:
    if value is None or value == "":
        return default
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ("1", "true", "yes", "on")
