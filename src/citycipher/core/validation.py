#!/usr/bin/env python3
# Copyright (C) 2026 Alex Stoyanov
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation; either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License along with this program.
# If not, see <https://www.gnu.org/licenses/>.

from __future__ import annotations

from collections.abc import Iterable
from decimal import Decimal, InvalidOperation
from typing import Any

from .bounds import MAX_POLICY_ID_CHARS


def require_dict(value: object, *, label: str) -> dict[Any, Any]:
    """Validate that value is a dict."""
    if not isinstance(value, dict):
        raise ValueError(f"{label} must be a dict")
    return value


def require_keys(mapping: dict[Any, Any], keys: Iterable[str], *, label: str) -> None:
    """Validate that all keys are present in mapping."""
    for key in keys:
        if key not in mapping:
            raise ValueError(f"{label} {key} is required")


def require_length(value: bytes, length: int, *, label: str, prefix: str = "") -> None:
    """Validate that bytes value has exact length."""
    if len(value) != length:
        raise ValueError(f"{prefix}{label} must be {length} bytes")


def require_bytes(
    value: object,
    length: int,
    *,
    label: str,
    prefix: str = "",
) -> bytes:
    """Validate that value is bytes with exact length."""
    if not isinstance(value, (bytes, bytearray)):
        raise ValueError(f"{prefix}{label} must be bytes")
    raw = bytes(value)
    require_length(raw, length, label=label, prefix=prefix)
    return raw


def require_int(value: object, *, label: str) -> int:
    """Validate that value is an int (bools rejected)."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{label} must be an int")
    return value


def require_positive_int(value: object, *, label: str) -> int:
    """Validate that value is a positive integer (> 0)."""
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ValueError(f"{label} must be a positive int")
    return value


def require_non_negative_int(value: object, *, label: str) -> int:
    """Validate that value is a non-negative integer (>= 0)."""
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValueError(f"{label} must be a non-negative int")
    return value


def require_int_range(value: int, *, min_val: int, max_val: int, label: str) -> int:
    """Validate that integer value is within range [min_val, max_val]."""
    if value < min_val or value > max_val:
        raise ValueError(f"{label} must be between {min_val} and {max_val}")
    return value


def require_non_empty_str(value: object, *, label: str) -> str:
    """Validate that value is a string with non-whitespace content."""
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"{label} must be a non-empty string")
    return value


def require_decimal(value: object, *, label: str) -> Decimal:
    """Coerce int/str/Decimal (or float via its repr) to a finite Decimal."""
    if isinstance(value, bool):
        raise ValueError(f"{label} must be a number")
    if isinstance(value, float):
        value = repr(value)
    if not isinstance(value, (int, str, Decimal)):
        raise ValueError(f"{label} must be a number")
    try:
        parsed = Decimal(value.strip() if isinstance(value, str) else value)
    except InvalidOperation as exc:
        raise ValueError(f"{label} must be a number") from exc
    if not parsed.is_finite():
        raise ValueError(f"{label} must be finite")
    return parsed


def require_policy_id(value: object, *, label: str = "policy id") -> str:
    """Validate a policy id: non-empty, bounded, no whitespace."""
    text = require_non_empty_str(value, label=label)
    if len(text) > MAX_POLICY_ID_CHARS:
        raise ValueError(f"{label} exceeds {MAX_POLICY_ID_CHARS} characters")
    if any(ch.isspace() for ch in text):
        raise ValueError(f"{label} must not contain whitespace")
    return text


def same_identity(left: str, right: str) -> bool:
    """Compare two identities case-insensitively."""
    return left.casefold() == right.casefold()
