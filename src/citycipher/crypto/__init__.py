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

from .authorization import (
    AuthorizationProof,
    Challenge,
    RevealContext,
    RevealSession,
    RevealState,
    SignatureAuthority,
    generate_public_key_material,
    request_challenge,
    require_authorized,
)
from .codec import Codec, DecreaseByPercent, IncreaseByPercent, Operation, Scale
from .paillier import (
    PaillierCodec,
    PaillierPrivateKey,
    PaillierPublicKey,
    generate_paillier_keypair,
)
from .reference import ReferenceCodec
from .signing import Ed25519Authority, generate_signing_keypair, identity_from_public_key

__all__ = [
    "AuthorizationProof",
    "Challenge",
    "Codec",
    "DecreaseByPercent",
    "Ed25519Authority",
    "IncreaseByPercent",
    "Operation",
    "PaillierCodec",
    "PaillierPrivateKey",
    "PaillierPublicKey",
    "ReferenceCodec",
    "RevealContext",
    "RevealSession",
    "RevealState",
    "Scale",
    "SignatureAuthority",
    "generate_paillier_keypair",
    "generate_public_key_material",
    "generate_signing_keypair",
    "identity_from_public_key",
    "request_challenge",
    "require_authorized",
]
