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

"""Encrypted-value contract shared by every scheme.

A codec turns decimals into :class:`Ciphertext` values, evaluates a small set of
scaling operations on them without exposing plaintext to the caller, and only
decrypts when handed a live :class:`AuthorizationProof`. Callers never depend on
how a particular scheme represents its payload.
"""

from __future__ import annotations

import base64
import binascii
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import Decimal
from fractions import Fraction
from typing import ClassVar, Union

from ..core.bounds import DEFAULT_PRECISION, MAX_CIPHERTEXT_CHARS
from ..core.models import Ciphertext
from ..core.validation import require_decimal
from .authorization import AuthorizationProof, SignatureVerifier, require_authorized
from .signing import verify_identity_signature


def _require_percent(value: object, *, label: str) -> Decimal:
    percent = require_decimal(value, label=label)
    if percent < 0:
        raise ValueError(f"{label} must be >= 0")
    return percent


@dataclass(frozen=True)
class IncreaseByPercent:
    percent: Decimal

    def __post_init__(self) -> None:
        object.__setattr__(self, "percent", _require_percent(self.percent, label="percent"))

    @property
    def factor(self) -> Fraction:
        return 1 + Fraction(self.percent) / 100

    def __call__(self, value: Decimal) -> Decimal:
        return value * (1 + self.percent / 100)


@dataclass(frozen=True)
class DecreaseByPercent:
    percent: Decimal

    def __post_init__(self) -> None:
        object.__setattr__(self, "percent", _require_percent(self.percent, label="percent"))

    @property
    def factor(self) -> Fraction:
        return 1 - Fraction(self.percent) / 100

    def __call__(self, value: Decimal) -> Decimal:
        return value * (1 - self.percent / 100)


@dataclass(frozen=True)
class Scale:
    k: Decimal

    def __post_init__(self) -> None:
        object.__setattr__(self, "k", require_decimal(self.k, label="scale factor"))

    @property
    def factor(self) -> Fraction:
        return Fraction(self.k)

    def __call__(self, value: Decimal) -> Decimal:
        return value * self.k


Operation = Union[IncreaseByPercent, DecreaseByPercent, Scale]


class Codec(ABC):
    scheme_tag: ClassVar[str]
    precision: ClassVar[Decimal] = DEFAULT_PRECISION

    @abstractmethod
    def encrypt(self, value: Decimal | int | str) -> Ciphertext:
        """Encrypt a decimal. Equal inputs give equal ciphertexts."""

    @abstractmethod
    def compute(self, ciphertext: Ciphertext, op: Operation) -> Ciphertext:
        """Return a ciphertext that decrypts to ``op(decrypt(ciphertext))``."""

    @abstractmethod
    def _decrypt(self, ciphertext: Ciphertext) -> Decimal: ...

    @abstractmethod
    def _validate_payload(self, payload: bytes) -> None:
        """Raise ValueError if payload is not a well-formed payload of this scheme."""

    def decrypt(
        self,
        ciphertext: Ciphertext,
        proof: AuthorizationProof | None,
        *,
        now: float | None = None,
        verifier: SignatureVerifier = verify_identity_signature,
    ) -> Decimal:
        require_authorized(proof, now=time.time() if now is None else now, verifier=verifier)
        self._require_scheme(ciphertext)
        return self._decrypt(ciphertext)

    def load(self, text: object) -> Ciphertext:
        """Rebuild a ciphertext from its wire string after validating it."""
        if not isinstance(text, str):
            raise ValueError("ciphertext must be a string")
        if len(text) > MAX_CIPHERTEXT_CHARS:
            raise ValueError(f"ciphertext exceeds {MAX_CIPHERTEXT_CHARS} characters")
        tag, sep, encoded = text.partition("-")
        if not sep or tag != self.scheme_tag:
            raise ValueError(f"ciphertext is not a {self.scheme_tag} value")
        try:
            payload = base64.b64decode(encoded, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise ValueError("ciphertext payload is not valid base64") from exc
        self._validate_payload(payload)
        return Ciphertext(scheme_tag=self.scheme_tag, payload=payload)

    def _seal(self, payload: bytes) -> Ciphertext:
        return Ciphertext(scheme_tag=self.scheme_tag, payload=payload)

    def _require_scheme(self, ciphertext: Ciphertext) -> None:
        if ciphertext.scheme_tag != self.scheme_tag:
            raise ValueError(
                f"ciphertext scheme {ciphertext.scheme_tag!r} does not match {self.scheme_tag!r}"
            )


def fraction_to_decimal(value: Fraction) -> Decimal:
    return Decimal(value.numerator) / Decimal(value.denominator)


__all__ = [
    "Codec",
    "DecreaseByPercent",
    "IncreaseByPercent",
    "Operation",
    "Scale",
    "fraction_to_decimal",
]
