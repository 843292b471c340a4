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

"""Store layout for policy records and the key index.

``policy_keys`` holds a JSON array of ids; ``policy_<id>`` holds one record::

    {"taxRate": "<ciphertext>", "tradeTariff": "<ciphertext>", "timestamp": 1000,
     "mayor": "0x...", "status": "draft", "happinessImpact": 3, "revenueImpact": -2}

Decoding is strict: any missing field, wrong type or foreign ciphertext raises
:class:`ParseError`.
"""

from __future__ import annotations

import json

from ..core.bounds import MAX_INDEX_BYTES, MAX_RECORD_BYTES
from ..core.errors import ParseError
from ..core.models import PolicyRecord, Status
from ..core.validation import (
    require_dict,
    require_int,
    require_keys,
    require_non_empty_str,
    require_non_negative_int,
    require_policy_id,
)
from ..crypto.codec import Codec

INDEX_KEY = "policy_keys"
RECORD_KEY_PREFIX = "policy_"
RECORD_FIELDS = (
    "taxRate",
    "tradeTariff",
    "timestamp",
    "mayor",
    "status",
    "happinessImpact",
    "revenueImpact",
)


def record_key(policy_id: str) -> str:
    return RECORD_KEY_PREFIX + policy_id


def encode_record(record: PolicyRecord) -> bytes:
    payload = {
        "taxRate": record.encrypted_tax_rate.to_wire(),
        "tradeTariff": record.encrypted_tariff.to_wire(),
        "timestamp": record.created_at,
        "mayor": record.owner,
        "status": record.status.value,
        "happinessImpact": record.happiness_impact,
        "revenueImpact": record.revenue_impact,
    }
    return json.dumps(payload, separators=(",", ":")).encode("utf-8")


def decode_record(policy_id: str, data: bytes, *, codec: Codec) -> PolicyRecord:
    key = record_key(policy_id)
    if len(data) > MAX_RECORD_BYTES:
        raise ParseError(f"record exceeds {MAX_RECORD_BYTES} bytes", key=key)
    try:
        decoded = require_dict(json.loads(data.decode("utf-8")), label="record")
        require_keys(decoded, RECORD_FIELDS, label="record")
        return PolicyRecord(
            id=require_policy_id(policy_id),
            encrypted_tax_rate=codec.load(decoded["taxRate"]),
            encrypted_tariff=codec.load(decoded["tradeTariff"]),
            created_at=require_non_negative_int(decoded["timestamp"], label="timestamp"),
            owner=require_non_empty_str(decoded["mayor"], label="mayor"),
            status=_parse_status(decoded["status"]),
            happiness_impact=require_int(decoded["happinessImpact"], label="happinessImpact"),
            revenue_impact=require_int(decoded["revenueImpact"], label="revenueImpact"),
        )
    except UnicodeDecodeError as exc:
        raise ParseError("record is not valid UTF-8", key=key) from exc
    except RecursionError as exc:
        raise ParseError("record is nested too deeply", key=key) from exc
    except ValueError as exc:
        # json.JSONDecodeError is a ValueError subclass.
        raise ParseError(str(exc), key=key) from exc


def encode_index(policy_ids: list[str] | tuple[str, ...]) -> bytes:
    return json.dumps(list(policy_ids), separators=(",", ":")).encode("utf-8")


def decode_index(data: bytes | None) -> list[str]:
    if not data or not data.strip():
        return []
    if len(data) > MAX_INDEX_BYTES:
        raise ParseError(f"index exceeds {MAX_INDEX_BYTES} bytes", key=INDEX_KEY)
    try:
        decoded = json.loads(data.decode("utf-8"))
    except (UnicodeDecodeError, ValueError) as exc:
        raise ParseError("index is not valid JSON", key=INDEX_KEY) from exc
    except RecursionError as exc:
        raise ParseError("index is nested too deeply", key=INDEX_KEY) from exc
    if not isinstance(decoded, list):
        raise ParseError("index must be a JSON array", key=INDEX_KEY)
    ids: list[str] = []
    for entry in decoded:
        try:
            ids.append(require_policy_id(entry, label="index entry"))
        except ValueError as exc:
            raise ParseError(str(exc), key=INDEX_KEY) from exc
    return ids


def _parse_status(value: object) -> Status:
    if not isinstance(value, str):
        raise ValueError("status must be a string")
    try:
        return Status(value)
    except ValueError as exc:
        raise ValueError(f"unknown status: {value}") from exc
