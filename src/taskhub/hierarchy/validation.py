# src/taskhub/hierarchy/validation.py

"""Field-level checks shared by the managers. Every failure is a ValidationError."""

from __future__ import annotations

import math
import re
from collections.abc import Iterable

from ..core.errors import ValidationError

_ID_RE = re.compile(r"^[0-9a-fA-F]{24}$")
_HEX_COLOR_RE = re.compile(r"^#([A-Fa-f0-9]{6}|[A-Fa-f0-9]{3})$")
_TIME_RE = re.compile(r"^([0-1]?[0-9]|2[0-3]):[0-5][0-9]$")
_URL_RE = re.compile(r"^https?://\S+$", re.IGNORECASE)

MAX_TAGS = 10


def check_id(value: str, what: str = "ID") -> str:
    if not isinstance(value, str) or not _ID_RE.match(value):
        raise ValidationError(f"Invalid {what} format")
    return value.lower()


def required_text(value: str | None, label: str, max_len: int) -> str:
    text = (value or "").strip()
    if not text:
        raise ValidationError(f"{label} is required")
    if len(text) > max_len:
        raise ValidationError(f"{label} must not exceed {max_len} characters")
    return text


def optional_text(value: str | None, label: str, max_len: int) -> str:
    text = (value or "").strip()
    if len(text) > max_len:
        raise ValidationError(f"{label} must not exceed {max_len} characters")
    return text


def check_color(value: str) -> str:
    if not isinstance(value, str) or not _HEX_COLOR_RE.match(value):
        raise ValidationError("Invalid color format (use hex format: #RRGGBB)")
    return value


def check_logo(value: str | None) -> str:
    logo = (value or "").strip()
    if logo and not _URL_RE.match(logo):
        raise ValidationError("Invalid logo URL")
    return logo


def check_due_time(value: str | None) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str) or not _TIME_RE.fullmatch(value):
        raise ValidationError("Invalid time format (use HH:MM format, e.g., 09:30 or 14:45)")
    hours, minutes = value.split(":")
    return f"{int(hours):02d}:{minutes}"


def check_tags(tags: Iterable[str] | None) -> list[str]:
    out: list[str] = []
    for raw in tags or []:
        tag = str(raw).strip()
        if not tag:
            raise ValidationError("Tag cannot be empty")
        out.append(tag)
    if len(out) > MAX_TAGS:
        raise ValidationError(f"Maximum {MAX_TAGS} tags allowed")
    return out


def check_timestamp(value: object, label: str) -> float:
    """Epoch seconds as float. Strings, bools and non-finite numbers are refused."""
    if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
        raise ValidationError(f"Invalid {label}")
    return float(value)


def check_date_order(start_date: float, end_date: float) -> None:
    if not end_date > start_date:
        raise ValidationError("End date must be after start date")
