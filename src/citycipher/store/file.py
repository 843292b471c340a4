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
import os
import tempfile
import threading
from pathlib import Path

from ..core.errors import StoreUnavailable
from ..encoding.cbor import dumps_canonical, loads_canonical


class FileStore:
    """Single-file store: one canonical CBOR map of ``str -> bytes``.

    Every ``set`` rewrites the file through a temp file and ``os.replace``. File
    I/O runs in worker threads; writes are serialized per store instance.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self._write_lock = threading.Lock()

    async def get(self, key: str) -> bytes | None:
        data = await asyncio.to_thread(self._load)
        return data.get(key)

    async def set(self, key: str, value: bytes) -> None:
        await asyncio.to_thread(self._set, key, bytes(value))

    async def is_available(self) -> bool:
        return await asyncio.to_thread(self._check_available)

    def _set(self, key: str, value: bytes) -> None:
        with self._write_lock:
            data = self._load()
            data[key] = value
            self._write(data)

    def _check_available(self) -> bool:
        if self.path.exists():
            try:
                self._load()
            except StoreUnavailable:
                return False
            return os.access(self.path, os.W_OK)
        parent = self.path.parent
        while not parent.exists() and parent != parent.parent:
            parent = parent.parent
        return os.access(parent, os.W_OK)

    def _load(self) -> dict[str, bytes]:
        try:
            raw = self.path.read_bytes()
        except FileNotFoundError:
            return {}
        except OSError as exc:
            raise StoreUnavailable(f"cannot read store {self.path}: {exc}") from exc
        if not raw:
            return {}
        try:
            decoded = loads_canonical(raw, label="store file")
        except ValueError as exc:
            raise StoreUnavailable(f"store file {self.path} is corrupt: {exc}") from exc
        if not isinstance(decoded, dict) or not all(
            isinstance(key, str) and isinstance(value, bytes) for key, value in decoded.items()
        ):
            raise StoreUnavailable(f"store file {self.path} is corrupt: unexpected layout")
        return decoded

    def _write(self, data: dict[str, bytes]) -> None:
        encoded = dumps_canonical(data)
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(prefix=".store-", dir=self.path.parent)
            try:
                with os.fdopen(fd, "wb") as handle:
                    handle.write(encoded)
                    handle.flush()
                    os.fsync(handle.fileno())
                os.replace(tmp_name, self.path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as exc:
            raise StoreUnavailable(f"cannot write store {self.path}: {exc}") from exc
