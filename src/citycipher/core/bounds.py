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

from decimal import Decimal

# Round-trip tolerance every bundled codec declares.
DEFAULT_PRECISION = Decimal("0.1")

# Maximum size of one serialized policy record (JSON bytes).
MAX_RECORD_BYTES = 262_144

# Maximum size of the serialized key index (JSON bytes).
MAX_INDEX_BYTES = 4_194_304

# Maximum length of a ciphertext wire string.
MAX_CIPHERTEXT_CHARS = 65_536

# Maximum length of a policy id.
MAX_POLICY_ID_CHARS = 128

# Paillier modulus size limits (bits).
MIN_PAILLIER_KEY_BITS = 512
MAX_PAILLIER_KEY_BITS = 8_192

# Action history depth kept by the application state.
HISTORY_LIMIT = 10

# Random bytes behind generated public key material (2000 hex nibbles).
PUBLIC_KEY_MATERIAL_BYTES = 1_000

# Default reveal validity window: 30 days.
DEFAULT_REVEAL_DURATION_SECONDS = 30 * 24 * 60 * 60


__all__ = [
    "DEFAULT_PRECISION",
    "DEFAULT_REVEAL_DURATION_SECONDS",
    "HISTORY_LIMIT",
    "MAX_CIPHERTEXT_CHARS",
    "MAX_INDEX_BYTES",
    "MAX_PAILLIER_KEY_BITS",
    "MAX_POLICY_ID_CHARS",
    "MAX_RECORD_BYTES",
    "MIN_PAILLIER_KEY_BITS",
    "PUBLIC_KEY_MATERIAL_BYTES",
]
