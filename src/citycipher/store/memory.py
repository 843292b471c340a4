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

import asyncio

from ..core.errors import StoreUnavailable


class MemoryStore:
    """In-process store with switches for simulating faults."""

    def __init__(self, data: dict[str, bytes] | None = None) -> None:
        self.data: dict[str, bytes] = dict(data or {})
        self.available = True
        self.failing_gets: set[str] = set()
        self.failing_sets: set[str] = set()
        self.get_calls: list[str] = []
        self.set_calls: list[str] = []

    async def get(self, key: str) -> bytes | None:
        self.get_calls.append(key)
        await asyncio.sleep(0)
        if key in self.failing_gets:
            raise StoreUnavailable(f"read failed for {key}")
        return self.data.get(key)

    async def set(self, key: str, value: bytes) -> None:
        self.set_calls.append(key)
        await asyncio.sleep(0)
        if key in self.failing_sets:
            raise StoreUnavailable(f"write failed for {key}")
        self.data[key] = bytes(value)

    async def is_available(self) -> bool:
        return self.available
