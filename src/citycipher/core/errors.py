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

"""Error taxonomy shared by the codec, lifecycle, repository and reveal layers."""

from __future__ import annotations


class CityCipherError(Exception):
    """Base class for every error raised by citycipher."""

    retriable = False


class StoreUnavailable(CityCipherError):
    """The backing key-value store cannot be reached or refused an operation."""


class RecordNotFound(CityCipherError, LookupError):
    def __init__(self, policy_id: str) -> None:
        super().__init__(f"policy not found: {policy_id}")
        self.policy_id = policy_id


class ParseError(CityCipherError, ValueError):
    """Stored bytes did not match the record or index schema."""

    def __init__(self, message: str, *, key: str | None = None) -> None:
        super().__init__(f"{key}: {message}" if key else message)
        self.key = key


class Unauthorized(CityCipherError, PermissionError):
    """The actor may not perform the operation, or no valid proof was presented."""


class InvalidTransition(CityCipherError):
    """The requested lifecycle transition is not legal from the current status."""


class DecryptionDenied(CityCipherError):
    """The signer explicitly refused to sign the reveal challenge."""


class DecryptionFailed(CityCipherError):
    """The reveal handshake failed for a reason other than refusal."""

    retriable = True


class ConflictError(CityCipherError):
    """A policy id is already taken in the store."""


class SignatureRejected(CityCipherError):
    """Raised by a signature authority when the user declines to sign."""


__all__ = [
    "CityCipherError",
    "ConflictError",
    "DecryptionDenied",
    "DecryptionFailed",
    "InvalidTransition",
    "ParseError",
    "RecordNotFound",
    "SignatureRejected",
    "StoreUnavailable",
    "Unauthorized",
]
