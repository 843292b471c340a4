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

"""Owned application state and the mayor-facing operations built on it.

Every operation takes the :class:`AppState` explicitly; nothing here reads
module-level mutable state.
"""

from __future__ import annotations

import time
from collections import deque
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Protocol

from ..core.bounds import DEFAULT_REVEAL_DURATION_SECONDS, HISTORY_LIMIT
from ..core.errors import Unauthorized
from ..core.models import PolicyRecord
from ..crypto.authorization import (
    RevealContext,
    RevealSession,
    RevealState,
    SignatureAuthority,
    SignatureVerifier,
)
from ..crypto.codec import Codec
from ..crypto.signing import verify_identity_signature
from ..policy.lifecycle import Transition
from ..policy.repository import PolicyRepository


class IdentityProvider(Protocol):
    def current_identity(self) -> str | None: ...

    def is_connected(self) -> bool: ...


class StaticIdentityProvider:
    def __init__(self, identity: str | None) -> None:
        self._identity = identity

    def current_identity(self) -> str | None:
        return self._identity

    def is_connected(self) -> bool:
        return bool(self._identity)


class ActionHistory:
    """Most recent actions first, capped at ``limit`` entries."""

    def __init__(
        self,
        limit: int = HISTORY_LIMIT,
        *,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._entries: deque[str] = deque(maxlen=limit)
        self._clock = clock

    def record(self, action: str) -> str:
        stamp = datetime.fromtimestamp(self._clock()).strftime("%H:%M:%S")
        entry = f"{stamp}: {action}"
        self._entries.appendleft(entry)
        return entry

    def entries(self) -> list[str]:
        return list(self._entries)


@dataclass(frozen=True)
class RevealSettings:
    store_address: str = "local"
    network_id: int = 0
    valid_duration_seconds: int = DEFAULT_REVEAL_DURATION_SECONDS


@dataclass(frozen=True)
class RevealedValues:
    policy_id: str
    tax_rate: Decimal
    tariff: Decimal


@dataclass
class AppState:
    identity: IdentityProvider
    repository: PolicyRepository
    reveal: RevealSettings = field(default_factory=RevealSettings)
    history: ActionHistory = field(default_factory=ActionHistory)
    verifier: SignatureVerifier = verify_identity_signature
    clock: Callable[[], float] = time.time
    reveal_session: RevealSession | None = None

    @property
    def codec(self) -> Codec:
        return self.repository.codec


def require_identity(state: AppState) -> str:
    identity = state.identity.current_identity()
    if not state.identity.is_connected() or not identity:
        raise Unauthorized("connect an identity first")
    return identity


async def submit_policy(state: AppState, tax_rate: Decimal, tariff: Decimal) -> PolicyRecord:
    owner = require_identity(state)
    record = await state.repository.create_policy(owner, tax_rate, tariff)
    state.history.record(f"Created policy {record.short_id()}")
    return record


async def activate_policy(state: AppState, policy_id: str) -> PolicyRecord:
    actor = require_identity(state)
    record = await state.repository.apply(policy_id, Transition.ACTIVATE, actor)
    state.history.record(f"Activated policy {record.short_id()}")
    return record


async def archive_policy(state: AppState, policy_id: str) -> PolicyRecord:
    actor = require_identity(state)
    record = await state.repository.apply(policy_id, Transition.ARCHIVE, actor)
    state.history.record(f"Archived policy {record.short_id()}")
    return record


def open_reveal_session(state: AppState) -> RevealSession:
    """Start a fresh reveal session, dropping any previous proof."""
    identity = require_identity(state)
    if state.reveal_session is not None:
        state.reveal_session.close()
    context = RevealContext.open(
        store_address=state.reveal.store_address,
        network_id=state.reveal.network_id,
        valid_duration_seconds=state.reveal.valid_duration_seconds,
        now=state.clock(),
    )
    state.reveal_session = RevealSession(
        identity,
        context,
        verifier=state.verifier,
        clock=state.clock,
    )
    return state.reveal_session


def close_reveal_session(state: AppState) -> None:
    if state.reveal_session is not None:
        state.reveal_session.close()
        state.reveal_session = None


async def reveal_policy(
    state: AppState,
    policy_id: str,
    authority: SignatureAuthority,
) -> RevealedValues:
    """Decrypt both fields of one policy behind a single signature.

    An expired session is replaced, so the signer is asked again.
    """
    session = state.reveal_session
    if session is None or session.state is RevealState.EXPIRED:
        session = open_reveal_session(state)
    record = await state.repository.get(policy_id)
    await session.authorize(authority)
    return RevealedValues(
        policy_id=record.id,
        tax_rate=session.decrypt(state.codec, record.encrypted_tax_rate),
        tariff=session.decrypt(state.codec, record.encrypted_tariff),
    )
