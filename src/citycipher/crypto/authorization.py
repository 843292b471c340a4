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

"""Signature-gated reveal sessions.

A session walks ``unauthenticated -> challenged -> authorized -> expired``. The
proof it yields is bound to the signer and the challenge context only: while it
is live it authorizes decrypting any field of any record viewed in the session.
"""

from __future__ import annotations

import logging
import secrets
import time
from collections.abc import Callable
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING, Protocol

from ..core.bounds import PUBLIC_KEY_MATERIAL_BYTES
from ..core.errors import DecryptionDenied, DecryptionFailed, SignatureRejected, Unauthorized
from ..core.validation import (
    require_non_empty_str,
    require_non_negative_int,
    require_positive_int,
)
from .signing import verify_identity_signature

if TYPE_CHECKING:
    from ..core.models import Ciphertext
    from .codec import Codec

logger = logging.getLogger(__name__)

SignatureVerifier = Callable[[str, str, bytes], bool]


class SignatureAuthority(Protocol):
    async def sign(self, message: str) -> bytes: ...


class RevealState(str, Enum):
    UNAUTHENTICATED = "unauthenticated"
    CHALLENGED = "challenged"
    AUTHORIZED = "authorized"
    EXPIRED = "expired"


@dataclass(frozen=True)
class RevealContext:
    public_key_material: str
    store_address: str
    network_id: int
    valid_from: int
    valid_duration_seconds: int

    def __post_init__(self) -> None:
        require_non_empty_str(self.public_key_material, label="public key material")
        require_non_empty_str(self.store_address, label="store address")
        require_non_negative_int(self.network_id, label="network id")
        require_non_negative_int(self.valid_from, label="valid from")
        require_positive_int(self.valid_duration_seconds, label="valid duration")

    @classmethod
    def open(
        cls,
        *,
        store_address: str,
        network_id: int,
        valid_duration_seconds: int,
        now: float | None = None,
    ) -> RevealContext:
        started = int(time.time() if now is None else now)
        return cls(
            public_key_material=generate_public_key_material(),
            store_address=store_address,
            network_id=network_id,
            valid_from=started,
            valid_duration_seconds=valid_duration_seconds,
        )

    @property
    def expires_at(self) -> int:
        return self.valid_from + self.valid_duration_seconds

    def canonical_message(self) -> str:
        return "\n".join(
            (
                f"publickey:{self.public_key_material}",
                f"storeAddress:{self.store_address}",
                f"networkId:{self.network_id}",
                f"validFrom:{self.valid_from}",
                f"validDurationSeconds:{self.valid_duration_seconds}",
            )
        )


@dataclass(frozen=True)
class Challenge:
    identity: str
    context: RevealContext
    message: str


@dataclass(frozen=True)
class AuthorizationProof:
    identity: str
    challenge: Challenge
    signature: bytes

    @property
    def valid_from(self) -> int:
        return self.challenge.context.valid_from

    @property
    def expires_at(self) -> int:
        return self.challenge.context.expires_at

    def is_valid_at(self, now: float) -> bool:
        return self.valid_from <= now < self.expires_at


def generate_public_key_material() -> str:
    return "0x" + secrets.token_hex(PUBLIC_KEY_MATERIAL_BYTES)


def request_challenge(identity: str, context: RevealContext) -> Challenge:
    require_non_empty_str(identity, label="identity")
    return Challenge(identity=identity, context=context, message=context.canonical_message())


def require_authorized(
    proof: AuthorizationProof | None,
    *,
    now: float,
    verifier: SignatureVerifier = verify_identity_signature,
) -> AuthorizationProof:
    """Check the proof window, then its signature over the challenge message."""
    if proof is None:
        raise Unauthorized("decryption requires an authorization proof")
    if now < proof.valid_from:
        raise Unauthorized("authorization proof is not valid yet")
    if now >= proof.expires_at:
        raise Unauthorized("authorization proof has expired")
    if proof.identity != proof.challenge.identity:
        raise Unauthorized("authorization proof identity does not match its challenge")
    try:
        verified = verifier(proof.identity, proof.challenge.message, proof.signature)
    except ValueError as exc:
        raise Unauthorized(f"authorization proof is malformed: {exc}") from exc
    if not verified:
        raise Unauthorized("authorization proof signature is invalid")
    return proof


class RevealSession:
    def __init__(
        self,
        identity: str,
        context: RevealContext,
        *,
        verifier: SignatureVerifier = verify_identity_signature,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.identity = require_non_empty_str(identity, label="identity")
        self.context = context
        self._verifier = verifier
        self._clock = clock
        self._challenge: Challenge | None = None
        self._proof: AuthorizationProof | None = None

    @property
    def state(self) -> RevealState:
        if self._proof is not None:
            if self._clock() >= self._proof.expires_at:
                return RevealState.EXPIRED
            return RevealState.AUTHORIZED
        if self._challenge is not None:
            return RevealState.CHALLENGED
        return RevealState.UNAUTHENTICATED

    @property
    def proof(self) -> AuthorizationProof | None:
        return self._proof

    def challenge(self) -> Challenge:
        if self._challenge is None:
            self._challenge = request_challenge(self.identity, self.context)
        return self._challenge

    def submit(self, signature: bytes) -> AuthorizationProof:
        challenge = self._challenge
        if challenge is None:
            raise DecryptionFailed("no reveal challenge is outstanding")
        if self._clock() >= self.context.expires_at:
            raise DecryptionFailed("reveal challenge window has already closed")
        if not isinstance(signature, (bytes, bytearray)):
            raise DecryptionFailed("signature must be bytes")
        try:
            verified = self._verifier(challenge.identity, challenge.message, bytes(signature))
        except ValueError as exc:
            raise DecryptionFailed(f"malformed signature: {exc}") from exc
        if not verified:
            raise DecryptionFailed("signature does not match the reveal challenge")
        self._proof = AuthorizationProof(
            identity=challenge.identity,
            challenge=challenge,
            signature=bytes(signature),
        )
        logger.info("Reveal session authorized for %s", self.identity)
        return self._proof

    async def authorize(self, authority: SignatureAuthority) -> AuthorizationProof:
        """Run the handshake, reusing a proof that is still live."""
        if self.state is RevealState.AUTHORIZED and self._proof is not None:
            return self._proof
        challenge = self.challenge()
        try:
            signature = await authority.sign(challenge.message)
        except SignatureRejected as exc:
            raise DecryptionDenied("signature request was rejected") from exc
        except DecryptionFailed:
            raise
        except Exception as exc:
            logger.warning("Signature request failed: %s", exc)
            raise DecryptionFailed(f"signature request failed: {exc}") from exc
        return self.submit(signature)

    def decrypt(self, codec: Codec, ciphertext: Ciphertext) -> Decimal:
        return codec.decrypt(ciphertext, self._proof, now=self._clock(), verifier=self._verifier)

    def close(self) -> None:
        self._challenge = None
        self._proof = None
