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

"""Wires config, key files, the file store and the codec into an :class:`AppState`."""

from __future__ import annotations

import asyncio
import os
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from pathlib import Path
from typing import TypeVar

from ...app import AppState, RevealSettings, StaticIdentityProvider
from ...config import AppConfig, ConfigPaths, build_paths, load_app_config
from ...crypto.codec import Codec
from ...crypto.paillier import PaillierCodec, decode_private_key
from ...crypto.reference import ReferenceCodec
from ...crypto.signing import decode_signing_key, identity_from_public_key, public_key_from_seed
from ...policy import PolicyRepository
from ...store import FileStore
from .log import configure_logging

_T = TypeVar("_T")

_KEYS_HINT = "run `citycipher keys init` first"


@dataclass
class Runtime:
    config: AppConfig
    paths: ConfigPaths
    seed: bytes
    state: AppState

    @property
    def identity(self) -> str:
        return identity_from_public_key(public_key_from_seed(self.seed))


def load_runtime(
    config_path: str | None,
    *,
    debug: bool = False,
    quiet: bool = False,
    clock: Callable[[], float] = time.time,
) -> Runtime:
    config = load_app_config(config_path)
    configure_logging(config.logging.level, debug=debug, quiet=quiet)
    paths = build_paths()
    seed = load_signing_seed(paths.signing_key_path)
    codec = build_codec(config, paths)
    repository = PolicyRepository(
        FileStore(config.store_path),
        codec,
        clock=clock,
        id_attempts=config.policy.id_attempts,
    )
    state = AppState(
        identity=StaticIdentityProvider(identity_from_public_key(public_key_from_seed(seed))),
        repository=repository,
        reveal=RevealSettings(
            store_address=config.store.address,
            network_id=config.reveal.network_id,
            valid_duration_seconds=config.reveal.duration_seconds,
        ),
        clock=clock,
    )
    return Runtime(config=config, paths=paths, seed=seed, state=state)


def build_codec(config: AppConfig, paths: ConfigPaths) -> Codec:
    if config.codec.scheme == "reference":
        return ReferenceCodec()
    private_key = decode_private_key(_read_key_file(paths.paillier_key_path, label="Paillier key"))
    return PaillierCodec.from_private_key(private_key)


def load_signing_seed(path: Path) -> bytes:
    return decode_signing_key(_read_key_file(path, label="signing key"))


def write_key_file(path: Path, data: bytes, *, force: bool) -> None:
    if path.exists() and not force:
        raise FileExistsError(f"{path} already exists (use --force to replace it)")
    path.parent.mkdir(parents=True, exist_ok=True)
    fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
    with os.fdopen(fd, "wb") as handle:
        handle.write(data)


def run_async(awaitable: Awaitable[_T]) -> _T:
    async def _wrapped() -> _T:
        return await awaitable

    return asyncio.run(_wrapped())


def _read_key_file(path: Path, *, label: str) -> bytes:
    try:
        return path.read_bytes()
    except FileNotFoundError as exc:
        raise FileNotFoundError(f"no {label} at {path}; {_KEYS_HINT}") from exc
