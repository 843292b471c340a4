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

import binascii
from typing import Any, cast

from Crypto.PublicKey import ECC
from Crypto.Signature import eddsa

from ..core.validation import require_bytes, require_dict, require_keys, require_length
from ..encoding.cbor import dumps_canonical, loads_canonical

SIGNING_KEY_VERSION = 1
REVEAL_DOMAIN = b"CITYCIPHER-REVEAL-V1"
IDENTITY_PREFIX = "0x"

ED25519_PUB_DER_PREFIX = bytes.fromhex("302a300506032b6570032100")
ED25519_PUB_LEN = 32
ED25519_SEED_LEN = 32
ED25519_SIG_LEN = 64


def generate_signing_keypair() -> tuple[bytes, bytes]:
    key = ECC.generate(curve="Ed25519")
    seed = cast(bytes | None, getattr(key, "seed", None))
    if seed is None:
        raise ValueError("missing Ed25519 seed")
    return seed, key.public_key().export_key(format="raw")


def public_key_from_seed(seed: bytes) -> bytes:
    return _key_from_seed(seed).public_key().export_key(format="raw")


def identity_from_public_key(sign_pub: bytes) -> str:
    require_length(sign_pub, ED25519_PUB_LEN, label="sign_pub")
    return IDENTITY_PREFIX + sign_pub.hex()


def public_key_from_identity(identity: str) -> bytes:
    if not identity.lower().startswith(IDENTITY_PREFIX):
        raise ValueError("identity must start with 0x")
    try:
        raw = bytes.fromhex(identity[len(IDENTITY_PREFIX) :])
    except ValueError as exc:
        raise ValueError("identity is not valid hex") from exc
    require_length(raw, ED25519_PUB_LEN, label="identity public key")
    return raw


def sign_reveal_message(message: str, *, sign_priv: bytes) -> bytes:
    return _sign_message(REVEAL_DOMAIN + message.encode("utf-8"), sign_priv=sign_priv)


def verify_reveal_message(message: str, *, sign_pub: bytes, signature: bytes) -> bool:
    return _verify_message(
        REVEAL_DOMAIN + message.encode("utf-8"),
        sign_pub=sign_pub,
        signature=signature,
    )


def verify_identity_signature(identity: str, message: str, signature: bytes) -> bool:
    """Verify a reveal signature against the Ed25519 key encoded in identity.

    Raises ValueError when identity or signature is malformed, returns False
    when the signature simply does not verify.
    """
    sign_pub = public_key_from_identity(identity)
    require_length(signature, ED25519_SIG_LEN, label="signature")
    return verify_reveal_message(message, sign_pub=sign_pub, signature=signature)


def encode_signing_key(seed: bytes) -> bytes:
    require_length(seed, ED25519_SEED_LEN, label="sign_priv")
    return dumps_canonical({"version": SIGNING_KEY_VERSION, "seed": seed})


def decode_signing_key(data: bytes) -> bytes:
    decoded = require_dict(loads_canonical(data, label="signing key"), label="signing key")
    require_keys(decoded, ("version", "seed"), label="signing key")
    if decoded["version"] != SIGNING_KEY_VERSION:
        raise ValueError(f"unsupported signing key version: {decoded['version']}")
    return require_bytes(decoded["seed"], ED25519_SEED_LEN, label="seed", prefix="signing key ")


class Ed25519Authority:
    """Signature authority backed by a local Ed25519 seed."""

    def __init__(self, seed: bytes) -> None:
        require_length(seed, ED25519_SEED_LEN, label="sign_priv")
        self._seed = seed
        self.identity = identity_from_public_key(public_key_from_seed(seed))

    async def sign(self, message: str) -> bytes:
        return sign_reveal_message(message, sign_priv=self._seed)


def _key_from_seed(seed: bytes) -> ECC.EccKey:
    require_length(seed, ED25519_SEED_LEN, label="sign_priv")
    return ECC.construct(curve="Ed25519", seed=cast(Any, seed))


def _key_from_public_bytes(sign_pub: bytes) -> ECC.EccKey:
    require_length(sign_pub, ED25519_PUB_LEN, label="sign_pub")
    return ECC.import_key(ED25519_PUB_DER_PREFIX + sign_pub)


def _sign_message(message: bytes, *, sign_priv: bytes) -> bytes:
    """Sign a message with Ed25519 private key."""
    key = _key_from_seed(sign_priv)
    signer = eddsa.new(key, mode="rfc8032")
    return signer.sign(message)


def _verify_message(message: bytes, *, sign_pub: bytes, signature: bytes) -> bool:
    """Verify an Ed25519 signature. Returns False on any error."""
    try:
        key = _key_from_public_bytes(sign_pub)
        verifier = eddsa.new(key, mode="rfc8032")
        verifier.verify(message, signature)
    except (ValueError, TypeError, binascii.Error):
        return False
    return True
