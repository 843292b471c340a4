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

"""Maps the policy lifecycle onto a key-value store.

The store has no transactions and no compare-and-swap:

* ``create`` writes the record before appending to the index, so a failed
  append leaves an orphaned (stored but unlisted) record behind. It is logged
  and the error re-raised; nothing here repairs it.
* ``apply`` is read-modify-write. Two concurrent ``apply`` calls on one id race
  and the later write wins.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable, Iterable
from decimal import Decimal

from ..core.errors import ConflictError, ParseError, RecordNotFound, StoreUnavailable
from ..core.models import PolicyRecord, Status, StatusCounts
from ..core.validation import require_policy_id, require_positive_int
from ..crypto.codec import Codec
from ..formats.records import (
    INDEX_KEY,
    decode_index,
    decode_record,
    encode_index,
    encode_record,
    record_key,
)
from ..store.base import KeyValueStore
from .lifecycle import (
    ImpactScorer,
    RandomImpactScorer,
    Transition,
    apply_transition,
    create_policy,
    new_policy_id,
)

logger = logging.getLogger(__name__)

DEFAULT_ID_ATTEMPTS = 5


class PolicyRepository:
    def __init__(
        self,
        store: KeyValueStore,
        codec: Codec,
        *,
        clock: Callable[[], float] = time.time,
        id_factory: Callable[[float], str] = new_policy_id,
        scorer: ImpactScorer | None = None,
        id_attempts: int = DEFAULT_ID_ATTEMPTS,
    ) -> None:
        self.store = store
        self.codec = codec
        self._clock = clock
        self._id_factory = id_factory
        self._scorer = scorer or RandomImpactScorer()
        self.id_attempts = require_positive_int(id_attempts, label="id attempts")
        self._pending_list: asyncio.Future[list[PolicyRecord]] | None = None

    async def create(self, record: PolicyRecord) -> str:
        await self._require_available()
        key = record_key(record.id)
        if await self.store.get(key) is not None:
            raise ConflictError(f"policy id already exists: {record.id}")
        await self.store.set(key, encode_record(record))
        logger.info("Stored policy %s", record.id)
        try:
            ids = decode_index(await self.store.get(INDEX_KEY))
            if record.id not in ids:
                ids.append(record.id)
                await self.store.set(INDEX_KEY, encode_index(ids))
        except Exception:
            logger.warning("Policy %s is stored but missing from %s", record.id, INDEX_KEY)
            raise
        return record.id

    async def create_policy(self, owner: str, tax_rate: Decimal, tariff: Decimal) -> PolicyRecord:
        """Create a draft policy under a fresh id, retrying on id collisions."""
        for attempt in range(1, self.id_attempts + 1):
            now = self._clock()
            record = create_policy(
                owner,
                tax_rate,
                tariff,
                codec=self.codec,
                policy_id=self._id_factory(now),
                created_at=int(now),
                scorer=self._scorer,
            )
            try:
                await self.create(record)
            except ConflictError:
                logger.warning(
                    "Policy id %s collided (attempt %d/%d)", record.id, attempt, self.id_attempts
                )
                continue
            return record
        raise ConflictError(f"no unique policy id after {self.id_attempts} attempts")

    async def get(self, policy_id: str) -> PolicyRecord:
        require_policy_id(policy_id)
        await self._require_available()
        return await self._fetch(policy_id)

    async def list(self) -> list[PolicyRecord]:
        """All readable indexed records, newest first.

        A call made while another listing is in flight joins that listing
        instead of starting a second one.
        """
        pending = self._pending_list
        if pending is None:
            pending = asyncio.ensure_future(self._load_listing())
            self._pending_list = pending
            pending.add_done_callback(self._clear_pending_list)
        else:
            logger.debug("Joining in-flight policy listing")
        return list(await asyncio.shield(pending))

    async def apply(self, policy_id: str, transition: Transition, actor: str) -> PolicyRecord:
        require_policy_id(policy_id)
        await self._require_available()
        current = await self._fetch(policy_id)
        updated = apply_transition(current, transition, actor, codec=self.codec)
        await self.store.set(record_key(policy_id), encode_record(updated))
        logger.info("Policy %s is now %s", policy_id, updated.status.value)
        return updated

    async def search(
        self,
        term: str = "",
        status: Status | str | None = None,
    ) -> list[PolicyRecord]:
        return filter_policies(await self.list(), term=term, status=status)

    async def _load_listing(self) -> list[PolicyRecord]:
        await self._require_available()
        ids = list(dict.fromkeys(decode_index(await self.store.get(INDEX_KEY))))
        fetched = await asyncio.gather(*(self._fetch_listed(policy_id) for policy_id in ids))
        records = [record for record in fetched if record is not None]
        records.sort(key=_listing_order)
        return records

    async def _fetch_listed(self, policy_id: str) -> PolicyRecord | None:
        try:
            return await self._fetch(policy_id)
        except RecordNotFound:
            logger.warning("Skipping %s: indexed but not stored", policy_id)
        except ParseError as exc:
            logger.warning("Skipping %s: %s", policy_id, exc)
        except StoreUnavailable as exc:
            logger.warning("Skipping %s: fetch failed: %s", policy_id, exc)
        except Exception as exc:
            logger.warning("Skipping %s: unexpected %s: %s", policy_id, type(exc).__name__, exc)
        return None

    async def _fetch(self, policy_id: str) -> PolicyRecord:
        data = await self.store.get(record_key(policy_id))
        if not data:
            raise RecordNotFound(policy_id)
        return decode_record(policy_id, data, codec=self.codec)

    async def _require_available(self) -> None:
        if not await self.store.is_available():
            raise StoreUnavailable("policy store is not available")

    def _clear_pending_list(self, task: asyncio.Future[list[PolicyRecord]]) -> None:
        if self._pending_list is task:
            self._pending_list = None


def filter_policies(
    records: Iterable[PolicyRecord],
    *,
    term: str = "",
    status: Status | str | None = None,
) -> list[PolicyRecord]:
    """Case-insensitive substring match on id or owner, plus an optional status filter."""
    wanted = _parse_status_filter(status)
    needle = term.strip().casefold()
    matches: list[PolicyRecord] = []
    for record in records:
        if wanted is not None and record.status is not wanted:
            continue
        if needle and needle not in record.id.casefold() and needle not in record.owner.casefold():
            continue
        matches.append(record)
    return matches


def count_by_status(records: Iterable[PolicyRecord]) -> StatusCounts:
    return StatusCounts.from_records(tuple(records))


def _parse_status_filter(status: Status | str | None) -> Status | None:
    if status is None or isinstance(status, Status):
        return status
    normalized = status.strip().lower()
    if normalized in ("", "all"):
        return None
    try:
        return Status(normalized)
    except ValueError as exc:
        raise ValueError("status must be one of: all, draft, active, archived") from exc


def _listing_order(record: PolicyRecord) -> tuple[int, str]:
    return -record.created_at, record.id
