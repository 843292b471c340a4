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

"""Policy lifecycle: draft -> active -> archived, draft -> archived.

Transitions return new records and never mutate their input. Ownership is
checked before status, so a stranger is told ``Unauthorized`` even for an
archived record.
"""

from __future__ import annotations

import logging
import secrets
import time
from decimal import Decimal
from enum import Enum
from typing import Protocol

from ..core.errors import InvalidTransition, Unauthorized
from ..core.models import PolicyRecord, Status
from ..core.validation import (
    require_int,
    require_non_empty_str,
    require_non_negative_int,
    require_policy_id,
    same_identity,
)
from ..crypto.codec import Codec, IncreaseByPercent

logger = logging.getLogger(__name__)

ACTIVATION_INCREASE = IncreaseByPercent(Decimal(10))
_ID_ALPHABET = "0123456789abcdefghijklmnopqrstuvwxyz"
_ID_SUFFIX_LEN = 4


class Transition(str, Enum):
    ACTIVATE = "activate"
    ARCHIVE = "archive"


class ImpactScorer(Protocol):
    def score(self, tax_rate: Decimal, tariff: Decimal) -> tuple[int, int]:
        """Return ``(happiness_impact, revenue_impact)`` for a new policy."""
        ...


class RandomImpactScorer:
    """Uniform integers in [-10, 9] for both impacts."""

    def score(self, tax_rate: Decimal, tariff: Decimal) -> tuple[int, int]:
        return secrets.randbelow(20) - 10, secrets.randbelow(20) - 10


def new_policy_id(now: float | None = None) -> str:
    millis = int((time.time() if now is None else now) * 1000)
    suffix = "".join(secrets.choice(_ID_ALPHABET) for _ in range(_ID_SUFFIX_LEN))
    return f"policy-{millis}-{suffix}"


def create_policy(
    owner: str,
    tax_rate: Decimal,
    tariff: Decimal,
    *,
    codec: Codec,
    policy_id: str,
    created_at: int,
    scorer: ImpactScorer,
) -> PolicyRecord:
    owner = require_non_empty_str(owner, label="owner")
    happiness, revenue = scorer.score(tax_rate, tariff)
    return PolicyRecord(
        id=require_policy_id(policy_id),
        encrypted_tax_rate=codec.encrypt(tax_rate),
        encrypted_tariff=codec.encrypt(tariff),
        created_at=require_non_negative_int(created_at, label="created_at"),
        owner=owner,
        status=Status.DRAFT,
        happiness_impact=require_int(happiness, label="happiness impact"),
        revenue_impact=require_int(revenue, label="revenue impact"),
    )


def activate(record: PolicyRecord, actor: str, *, codec: Codec) -> PolicyRecord:
    _require_owner(record, actor)
    if record.status is not Status.DRAFT:
        raise InvalidTransition(
            f"only draft policies can be activated (status: {record.status.value})"
        )
    logger.debug("Activating %s", record.id)
    return PolicyRecord(
        id=record.id,
        encrypted_tax_rate=codec.compute(record.encrypted_tax_rate, ACTIVATION_INCREASE),
        encrypted_tariff=codec.compute(record.encrypted_tariff, ACTIVATION_INCREASE),
        created_at=record.created_at,
        owner=record.owner,
        status=Status.ACTIVE,
        happiness_impact=record.happiness_impact,
        revenue_impact=record.revenue_impact,
    )


def archive(record: PolicyRecord, actor: str) -> PolicyRecord:
    _require_owner(record, actor)
    if record.status.terminal:
        raise InvalidTransition("policy is already archived")
    logger.debug("Archiving %s", record.id)
    return PolicyRecord(
        id=record.id,
        encrypted_tax_rate=record.encrypted_tax_rate,
        encrypted_tariff=record.encrypted_tariff,
        created_at=record.created_at,
        owner=record.owner,
        status=Status.ARCHIVED,
        happiness_impact=record.happiness_impact,
        revenue_impact=record.revenue_impact,
    )


def apply_transition(
    record: PolicyRecord,
    transition: Transition,
    actor: str,
    *,
    codec: Codec,
) -> PolicyRecord:
    if transition is Transition.ACTIVATE:
        return activate(record, actor, codec=codec)
    if transition is Transition.ARCHIVE:
        return archive(record, actor)
    raise ValueError(f"unknown transition: {transition}")


def _require_owner(record: PolicyRecord, actor: str) -> None:
    if not isinstance(actor, str) or not same_identity(actor, record.owner):
        raise Unauthorized(f"only the mayor who created {record.id} may change it")
