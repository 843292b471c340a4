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

import typer
from rich.console import Console
from rich.text import Text

from ...core.errors import SignatureRejected
from ...crypto.signing import Ed25519Authority
from ..api import console_err, panel


class ConfirmingAuthority:
    """Signs reveal challenges with the local key after asking on the terminal."""

    def __init__(self, seed: bytes, *, assume_yes: bool = False, console: Console | None = None) -> None:
        self._signer = Ed25519Authority(seed)
        self._assume_yes = assume_yes
        self._console = console or console_err
        self.identity = self._signer.identity

    async def sign(self, message: str) -> bytes:
        if not self._assume_yes:
            self._console.print(panel("Reveal request", Text(message)))
            if not typer.confirm("Sign this reveal request?", default=False, err=True):
                raise SignatureRejected("reveal request declined")
        return await self._signer.sign(message)
