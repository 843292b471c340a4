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

import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal

from ..core.bounds import (
    DEFAULT_REVEAL_DURATION_SECONDS,
    MAX_PAILLIER_KEY_BITS,
    MIN_PAILLIER_KEY_BITS,
)
from .installer import build_paths, resolve_config_path

CodecScheme = Literal["paillier", "reference"]
LogLevel = Literal["debug", "info", "warning", "error"]

CODEC_SCHEMES: tuple[str, ...] = ("paillier", "reference")
LOG_LEVELS: tuple[str, ...] = ("debug", "info", "warning", "error")


@dataclass(frozen=True)
class StoreConfig:
    path: Path | None = None
    address: str = "local"


@dataclass(frozen=True)
class RevealConfig:
    network_id: int = 0
    duration_seconds: int = DEFAULT_REVEAL_DURATION_SECONDS


@dataclass(frozen=True)
class CodecConfig:
    scheme: CodecScheme = "paillier"
    key_bits: int = 2048


@dataclass(frozen=True)
class PolicyConfig:
    id_attempts: int = 5


@dataclass(frozen=True)
class LoggingConfig:
    level: LogLevel = "warning"


@dataclass(frozen=True)
class AppConfig:
    source_path: Path
    store: StoreConfig = field(default_factory=StoreConfig)
    reveal: RevealConfig = field(default_factory=RevealConfig)
    codec: CodecConfig = field(default_factory=CodecConfig)
    policy: PolicyConfig = field(default_factory=PolicyConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @property
    def store_path(self) -> Path:
        if self.store.path is not None:
            return self.store.path
        return build_paths().store_path


def load_app_config(path: str | Path | None = None) -> AppConfig:
    config_path = resolve_config_path(path)
    data = _load_toml(config_path)
    return AppConfig(
        source_path=config_path,
        store=_parse_store(_get_dict(data, "store")),
        reveal=_parse_reveal(_get_dict(data, "network"), _get_dict(data, "reveal")),
        codec=_parse_codec(_get_dict(data, "codec")),
        policy=_parse_policy(_get_dict(data, "policy")),
        logging=_parse_logging(_get_dict(data, "logging")),
    )


def _parse_store(cfg: dict[str, object]) -> StoreConfig:
    path = _parse_optional_str(cfg.get("path"), field="store.path")
    address = _parse_optional_str(cfg.get("address"), field="store.address")
    return StoreConfig(
        path=Path(path).expanduser() if path else None,
        address=address or "local",
    )


def _parse_reveal(network: dict[str, object], reveal: dict[str, object]) -> RevealConfig:
    network_id = _parse_int_strict(network.get("id", 0), field="network.id")
    if network_id < 0:
        raise ValueError("network.id must be a non-negative integer")
    duration = _parse_int_strict(
        reveal.get("duration_seconds", DEFAULT_REVEAL_DURATION_SECONDS),
        field="reveal.duration_seconds",
    )
    if duration <= 0:
        raise ValueError("reveal.duration_seconds must be a positive integer")
    return RevealConfig(network_id=network_id, duration_seconds=duration)


def _parse_codec(cfg: dict[str, object]) -> CodecConfig:
    scheme = _parse_choice(cfg.get("scheme"), field="codec.scheme", choices=CODEC_SCHEMES)
    key_bits = _parse_int_strict(cfg.get("key_bits", 2048), field="codec.key_bits")
    if not MIN_PAILLIER_KEY_BITS <= key_bits <= MAX_PAILLIER_KEY_BITS:
        raise ValueError(
            f"codec.key_bits must be between {MIN_PAILLIER_KEY_BITS} and {MAX_PAILLIER_KEY_BITS}"
        )
    return CodecConfig(scheme=scheme or "paillier", key_bits=key_bits)  # type: ignore[arg-type]


def _parse_policy(cfg: dict[str, object]) -> PolicyConfig:
    attempts = _parse_int_strict(cfg.get("id_attempts", 5), field="policy.id_attempts")
    if attempts <= 0:
        raise ValueError("policy.id_attempts must be a positive integer")
    return PolicyConfig(id_attempts=attempts)


def _parse_logging(cfg: dict[str, object]) -> LoggingConfig:
    level = _parse_choice(cfg.get("level"), field="logging.level", choices=LOG_LEVELS)
    return LoggingConfig(level=level or "warning")  # type: ignore[arg-type]


def _load_toml(path: Path) -> dict[str, object]:
    with path.open("rb") as handle:
        return tomllib.load(handle)


def _get_dict(data: dict[str, object], key: str) -> dict[str, object]:
    value = data.get(key)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ValueError(f"[{key}] must be a table")
    return value


def _parse_optional_str(value: object, *, field: str) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValueError(f"{field} must be a string")
    normalized = value.strip()
    return normalized or None


def _parse_choice(value: object, *, field: str, choices: tuple[str, ...]) -> str | None:
    normalized = _parse_optional_str(value, field=field)
    if normalized is None:
        return None
    normalized = normalized.lower()
    if normalized not in choices:
        raise ValueError(f"{field} must be one of: {', '.join(choices)}")
    return normalized


def _parse_int_strict(value: object, *, field: str) -> int:
    if isinstance(value, bool):
        raise ValueError(f"{field} must be an integer")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        stripped = value.strip()
        if not stripped:
            raise ValueError(f"{field} must be an integer")
        try:
            return int(stripped)
        except ValueError as exc:
            raise ValueError(f"{field} must be an integer") from exc
    raise ValueError(f"{field} must be an integer")
