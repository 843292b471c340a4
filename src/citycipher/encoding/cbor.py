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

from typing import Any

import cbor2


def dumps_canonical(value: Any) -> bytes:
    return cbor2.dumps(value, canonical=True)


def loads_canonical(data: bytes, *, label: str) -> Any:
    """Decode CBOR and reject input that is not in canonical form."""
    try:
        decoded = cbor2.loads(data)
    except (cbor2.CBORDecodeError, ValueError, TypeError) as exc:
        raise ValueError(f"{label} is not valid CBOR") from exc
    if dumps_canonical(decoded) != data:
        raise ValueError(f"{label} is not canonical CBOR")
    return decoded
