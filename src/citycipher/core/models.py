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

import base64
from dataclasses import dataclass
from enum import Enum


class Status(str, Enum):
    DRAFT = "draft"
    ACTIVE = "active"
    ARCHIVED = "archived"

    @property
    def terminal(self) -> bool:
        return self is Status.ARCHIVED


@dataclass(frozen=True)
class Ciphertext:
    """Opaque encrypted value.

    Instances come from a codec's ``encrypt``/``compute`` or from ``Codec.load``
    after the wire string has been validated for that codec's scheme.
    """

    scheme_tag: str
    payload: bytes

    def to_wire(self) -> str:
        encoded = base64.b64encode(self.payload).decode("ascii")
        return f"{self.scheme_tag}-{encoded}"

    def preview(self, length: int = 30) -> str:
        wire = self.to_wire()
        if len(wire) <= length:
            return wire
        return wire[:length] + "..."


@dataclass(frozen=True)
class PolicyRecord:
    id: str
    encrypted_tax_rate: Ciphertext
    encrypted_tariff: Ciphertext
    created_at: int
    owner: str
    status: Status
    happiness_impact: int
    revenue_impact: int

    def short_id(self) -> str:
        return self.id[:8]

    def short_owner(self) -> str:
        if len(self.owner) <= 12:
            return self.owner
        return f"{self.owner[:6]}...{self.owner[-4:]}"


@dataclass(frozen=True)
class StatusCounts:
    total: int
    draft: int
    active: int
    archived: int

    @classmethod
    def from_records(cls, records: list[PolicyRecord] | tuple[PolicyRecord, ...]) -> StatusCounts:
        draft = sum(1 for record in records if record.status is Status.DRAFT)
        active = sum(1 for record in records if record.status is Status.ACTIVE)
        archived = sum(1 for record in records if record.status is Status.ARCHIVED)
        return cls(total=len(records), draft=draft, active=active, archived=archived)
