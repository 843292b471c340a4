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

"""Paillier encryption of fixed-point decimals.

A value ``a/b`` is stored as ``E(a)`` together with the public denominator
``b``. Paillier is additively homomorphic, so ``E(a)^k == E(k*a)``: scaling by a
rational ``p/q`` raises the ciphertext to ``p`` and multiplies the stored
denominator by ``q``. No step of ``compute`` needs the private key.

Magnitudes must stay below ``n/2``; every operation multiplies the hidden
numerator and the denominator, so very long operation chains eventually wrap.
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass
from decimal import Decimal
from fractions import Fraction
from typing import Any

from Crypto.Hash import SHAKE256
from Crypto.Util.number import GCD, getPrime, inverse

from ..core.bounds import MAX_PAILLIER_KEY_BITS, MIN_PAILLIER_KEY_BITS
from ..core.models import Ciphertext
from ..core.validation import (
    require_bytes,
    require_decimal,
    require_dict,
    require_int_range,
    require_keys,
    require_positive_int,
)
from ..encoding.cbor import dumps_canonical, loads_canonical
from .codec import Codec, Operation, fraction_to_decimal

PAILLIER_SCHEME_TAG = "PHE"
PAYLOAD_VERSION = 1
KEY_VERSION = 1
FINGERPRINT_LEN = 8
_NONCE_DOMAIN = b"CITYCIPHER-PAILLIER-R-V1"


@dataclass(frozen=True)
class PaillierPublicKey:
    n: int

    @property
    def n_square(self) -> int:
        return self.n * self.n

    @property
    def bits(self) -> int:
        return self.n.bit_length()

    def fingerprint(self) -> bytes:
        return hashlib.sha256(_int_bytes(self.n)).digest()[:FINGERPRINT_LEN]


@dataclass(frozen=True)
class PaillierPrivateKey:
    public: PaillierPublicKey
    lam: int
    mu: int


def generate_paillier_keypair(bits: int = 2048) -> PaillierPrivateKey:
    require_positive_int(bits, label="key bits")
    require_int_range(
        bits, min_val=MIN_PAILLIER_KEY_BITS, max_val=MAX_PAILLIER_KEY_BITS, label="key bits"
    )
    half = bits // 2
    while True:
        p = getPrime(half)
        q = getPrime(bits - half)
        if p == q:
            continue
        n = p * q
        if GCD(n, (p - 1) * (q - 1)) != 1:
            continue
        lam = (p - 1) * (q - 1) // GCD(p - 1, q - 1)
        mu = inverse(lam, n)
        return PaillierPrivateKey(public=PaillierPublicKey(n=n), lam=lam, mu=mu)


def encode_private_key(key: PaillierPrivateKey) -> bytes:
    return dumps_canonical(
        {"version": KEY_VERSION, "n": key.public.n, "lam": key.lam, "mu": key.mu}
    )


def decode_private_key(data: bytes) -> PaillierPrivateKey:
    decoded = require_dict(loads_canonical(data, label="paillier key"), label="paillier key")
    require_keys(decoded, ("version", "n", "lam", "mu"), label="paillier key")
    if decoded["version"] != KEY_VERSION:
        raise ValueError(f"unsupported paillier key version: {decoded['version']}")
    n = require_positive_int(decoded["n"], label="paillier key n")
    lam = require_positive_int(decoded["lam"], label="paillier key lam")
    mu = require_positive_int(decoded["mu"], label="paillier key mu")
    if (lam * mu) % n != 1:
        raise ValueError("paillier key is inconsistent")
    return PaillierPrivateKey(public=PaillierPublicKey(n=n), lam=lam, mu=mu)


class PaillierCodec(Codec):
    scheme_tag = PAILLIER_SCHEME_TAG

    def __init__(
        self,
        public_key: PaillierPublicKey,
        private_key: PaillierPrivateKey | None = None,
    ) -> None:
        if private_key is not None and private_key.public != public_key:
            raise ValueError("private key does not match public key")
        self.public_key = public_key
        self._private_key = private_key

    @classmethod
    def from_private_key(cls, private_key: PaillierPrivateKey) -> PaillierCodec:
        return cls(private_key.public, private_key)

    def encrypt(self, value: Decimal | int | str) -> Ciphertext:
        plain = Fraction(require_decimal(value, label="value"))
        numerator = self._require_capacity(plain.numerator)
        c = self._raw_encrypt(numerator, plain.denominator)
        return self._seal(self._encode_payload(c, plain.denominator))

    def compute(self, ciphertext: Ciphertext, op: Operation) -> Ciphertext:
        self._require_scheme(ciphertext)
        c, denominator = self._decode_payload(ciphertext.payload)
        factor = op.factor
        n_square = self.public_key.n_square
        scaled = pow(c, factor.numerator, n_square)
        return self._seal(self._encode_payload(scaled, denominator * factor.denominator))

    def _decrypt(self, ciphertext: Ciphertext) -> Decimal:
        if self._private_key is None:
            raise ValueError("paillier codec has no private key")
        c, denominator = self._decode_payload(ciphertext.payload)
        n = self.public_key.n
        u = pow(c, self._private_key.lam, self.public_key.n_square)
        m = ((u - 1) // n) * self._private_key.mu % n
        if m > n // 2:
            m -= n
        return fraction_to_decimal(Fraction(m, denominator))

    def _validate_payload(self, payload: bytes) -> None:
        self._decode_payload(payload)

    def _raw_encrypt(self, m: int, denominator: int) -> int:
        n = self.public_key.n
        n_square = self.public_key.n_square
        r = self._derive_nonce(m, denominator)
        return ((1 + (m % n) * n) * pow(r, n, n_square)) % n_square

    def _derive_nonce(self, m: int, denominator: int) -> int:
        n = self.public_key.n
        width = (n.bit_length() + 7) // 8 + 16
        counter = 0
        while True:
            shake = SHAKE256.new()
            shake.update(_NONCE_DOMAIN)
            shake.update(_int_bytes(n))
            shake.update(_signed_bytes(m))
            shake.update(_int_bytes(denominator))
            shake.update(counter.to_bytes(4, "big"))
            r = int.from_bytes(shake.read(width), "big") % n
            if r > 1 and GCD(r, n) == 1:
                return r
            counter += 1

    def _require_capacity(self, numerator: int) -> int:
        if abs(numerator) >= self.public_key.n // 2:
            raise ValueError("value exceeds paillier key capacity")
        return numerator

    def _encode_payload(self, c: int, denominator: int) -> bytes:
        payload: dict[str, Any] = {
            "version": PAYLOAD_VERSION,
            "key": self.public_key.fingerprint(),
            "c": c,
            "d": denominator,
        }
        return dumps_canonical(payload)

    def _decode_payload(self, payload: bytes) -> tuple[int, int]:
        decoded = require_dict(loads_canonical(payload, label="paillier payload"), label="payload")
        require_keys(decoded, ("version", "key", "c", "d"), label="paillier payload")
        if decoded["version"] != PAYLOAD_VERSION:
            raise ValueError(f"unsupported paillier payload version: {decoded['version']}")
        fingerprint = require_bytes(
            decoded["key"], FINGERPRINT_LEN, label="key", prefix="paillier payload "
        )
        if fingerprint != self.public_key.fingerprint():
            raise ValueError("ciphertext was produced under a different paillier key")
        c = require_positive_int(decoded["c"], label="paillier payload c")
        if c >= self.public_key.n_square:
            raise ValueError("paillier payload c is out of range")
        denominator = require_positive_int(decoded["d"], label="paillier payload d")
        return c, denominator


def _int_bytes(value: int) -> bytes:
    return value.to_bytes(max(1, (value.bit_length() + 7) // 8), "big")


def _signed_bytes(value: int) -> bytes:
    return (b"-" if value < 0 else b"+") + _int_bytes(abs(value))
