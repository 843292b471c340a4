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

import os
import shutil
import sys
from dataclasses import dataclass
from pathlib import Path

from platformdirs import user_config_dir, user_data_dir

APP_NAME = "citycipher"
PACKAGE_ROOT = Path(__file__).resolve().parents[1]
DEFAULT_CONFIG_PATH = PACKAGE_ROOT / "config/default.toml"
CONFIG_FILENAME = "config.toml"
STORE_FILENAME = "store.cbor"
SIGNING_KEY_FILENAME = "signing.key"
PAILLIER_KEY_FILENAME = "paillier.key"
XDG_CONFIG_ENV = "XDG_CONFIG_HOME"
XDG_DATA_ENV = "XDG_DATA_HOME"


@dataclass(frozen=True)
class ConfigPaths:
    user_config_dir: Path
    user_config_file: Path
    user_data_dir: Path
    store_path: Path
    keys_dir: Path
    signing_key_path: Path
    paillier_key_path: Path


def _user_config_dir() -> Path:
    xdg_override = os.environ.get(XDG_CONFIG_ENV)
    if xdg_override:
        return Path(xdg_override) / APP_NAME
    if sys.platform == "darwin":
        return Path.home() / ".config" / APP_NAME
    return Path(user_config_dir(APP_NAME, appauthor=False))


def _user_data_dir() -> Path:
    xdg_override = os.environ.get(XDG_DATA_ENV)
    if xdg_override:
        return Path(xdg_override) / APP_NAME
    return Path(user_data_dir(APP_NAME, appauthor=False))


def build_paths() -> ConfigPaths:
    config_dir = _user_config_dir()
    data_dir = _user_data_dir()
    keys_dir = data_dir / "keys"
    return ConfigPaths(
        user_config_dir=config_dir,
        user_config_file=config_dir / CONFIG_FILENAME,
        user_data_dir=data_dir,
        store_path=data_dir / STORE_FILENAME,
        keys_dir=keys_dir,
        signing_key_path=keys_dir / SIGNING_KEY_FILENAME,
        paillier_key_path=keys_dir / PAILLIER_KEY_FILENAME,
    )


def resolve_config_path(path: str | Path | None = None) -> Path:
    """Explicit path, then the user config, then the packaged default."""
    if path:
        return Path(path).expanduser()
    user_file = build_paths().user_config_file
    if user_file.exists():
        return user_file
    return DEFAULT_CONFIG_PATH


def init_user_config() -> Path:
    paths = build_paths()
    try:
        paths.user_config_dir.mkdir(parents=True, exist_ok=True)
        _copy_if_missing(DEFAULT_CONFIG_PATH, paths.user_config_file)
    except OSError as exc:
        raise OSError(f"unable to create config dir at {paths.user_config_dir}") from exc
    return paths.user_config_dir


def user_config_needs_init() -> bool:
    return not build_paths().user_config_file.exists()


def _copy_if_missing(source: Path, dest: Path) -> None:
    if dest.exists():
        return
    dest.parent.mkdir(parents=True, exist_ok=True)
    shutil.copyfile(source, dest)
