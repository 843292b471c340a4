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

from decimal import Decimal, InvalidOperation

from ..core.models import Ciphertext
from ..core.validation import require_decimal
from .codec import Codec, Operation

REFERENCE_SCHEME_TAG = "FHE"


class ReferenceCodec(Codec):
    """Toy scheme: the payload is the decimal's text form.

    Wire strings look like ``FHE-<base64 of "12.5">``. It offers no secrecy and
    exists so stores written by older clients stay readable.
    """

    scheme_tag = REFERENCE_SCHEME_TAG

    def encrypt(self, value: Decimal | int | str) -> Ciphertext:
        plain = require_decimal(value, label="value")
        return self._seal(_format_plain(plain).encode("ascii"))

    def compute(self, ciphertext: Ciphertext, op: Operation) -> Ciphertext:
        self._require_scheme(ciphertext)
        result = op(_parse_payload(ciphertext.payload))
        return self._seal(_format_plain(result).encode("ascii"))

    def _decrypt(self, ciphertext: Ciphertext) -> Decimal:
        return _parse_payload(ciphertext.payload)

    def _validate_payload(self, payload: bytes) -> None:
        _parse_payload(payload)


def _format_plain(value: Decimal) -> str:
    text = format(value, "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    if text in ("", "-", "-0"):
        return "0"
    return text


def _parse_payload(payload: bytes) -> Decimal:
    try:
        text = payload.decode("ascii")
        value = Decimal(text.strip())
    except (UnicodeDecodeError, InvalidOperation) as exc:
        raise ValueError("reference ciphertext payload is not a number") from exc
    if not value.is_finite():
        raise ValueError("reference ciphertext payload must be finite")
    return value
