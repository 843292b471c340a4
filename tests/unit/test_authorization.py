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

import dataclasses
import unittest
from decimal import Decimal

from citycipher.core.errors import (
    DecryptionDenied,
    DecryptionFailed,
    SignatureRejected,
    Unauthorized,
)
from citycipher.crypto.authorization import (
    RevealContext,
    RevealSession,
    RevealState,
    generate_public_key_material,
    require_authorized,
)
from citycipher.crypto.reference import ReferenceCodec
from citycipher.crypto.signing import Ed25519Authority
from tests.test_support import (
    OTHER_IDENTITY,
    OTHER_SIGNING_SEED,
    TEST_IDENTITY,
    TEST_NOW,
    TEST_SIGNING_SEED,
    FixedClock,
    live_proof,
)

DURATION = 30 * 24 * 60 * 60


class _RejectingAuthority:
    def __init__(self) -> None:
        self.calls = 0

    async def sign(self, message: str) -> bytes:
        self.calls += 1
        raise SignatureRejected("user said no")


class _BrokenAuthority:
    async def sign(self, message: str) -> bytes:
        raise ConnectionError("wallet went away")


class _CountingAuthority:
    def __init__(self, seed: bytes) -> None:
        self._inner = Ed25519Authority(seed)
        self.calls = 0

    async def sign(self, message: str) -> bytes:
        self.calls += 1
        return await self._inner.sign(message)


def _context(now: float = TEST_NOW, duration: int = DURATION) -> RevealContext:
    return RevealContext.open(
        store_address="local",
        network_id=7,
        valid_duration_seconds=duration,
        now=now,
    )


class TestRevealContext(unittest.TestCase):
    def test_canonical_message_layout(self) -> None:
        context = _context()
        lines = context.canonical_message().split("\n")
        self.assertEqual(
            [line.split(":", 1)[0] for line in lines],
            ["publickey", "storeAddress", "networkId", "validFrom", "validDurationSeconds"],
        )
        self.assertEqual(lines[2], "networkId:7")
        self.assertEqual(lines[3], f"validFrom:{int(TEST_NOW)}")
        self.assertEqual(lines[4], f"validDurationSeconds:{DURATION}")
        self.assertEqual(context.expires_at, int(TEST_NOW) + DURATION)

    def test_public_key_material_is_fresh_hex(self) -> None:
        first = generate_public_key_material()
        self.assertTrue(first.startswith("0x"))
        self.assertEqual(len(first), 2 + 2000)
        self.assertNotEqual(first, generate_public_key_material())

    def test_invalid_context_fields_rejected(self) -> None:
        with self.assertRaises(ValueError):
            _context(duration=0)
        with self.assertRaises(ValueError):
            RevealContext.open(store_address="", network_id=0, valid_duration_seconds=1, now=0)


class TestRevealSession(unittest.IsolatedAsyncioTestCase):
    def setUp(self) -> None:
        self.clock = FixedClock()
        self.session = RevealSession(TEST_IDENTITY, _context(), clock=self.clock)
        self.codec = ReferenceCodec()

    async def test_state_walk(self) -> None:
        self.assertIs(self.session.state, RevealState.UNAUTHENTICATED)
        self.session.challenge()
        self.assertIs(self.session.state, RevealState.CHALLENGED)
        await self.session.authorize(Ed25519Authority(TEST_SIGNING_SEED))
        self.assertIs(self.session.state, RevealState.AUTHORIZED)
        self.clock.advance(DURATION)
        self.assertIs(self.session.state, RevealState.EXPIRED)

    async def test_decrypt_after_authorize(self) -> None:
        ciphertext = self.codec.encrypt("12.5")
        with self.assertRaises(Unauthorized):
            self.session.decrypt(self.codec, ciphertext)
        await self.session.authorize(Ed25519Authority(TEST_SIGNING_SEED))
        self.assertEqual(self.session.decrypt(self.codec, ciphertext), Decimal("12.5"))

    async def test_proof_reused_while_live(self) -> None:
        authority = _CountingAuthority(TEST_SIGNING_SEED)
        first = await self.session.authorize(authority)
        second = await self.session.authorize(authority)
        self.assertIs(first, second)
        self.assertEqual(authority.calls, 1)

    async def test_expired_proof_stops_decrypting(self) -> None:
        ciphertext = self.codec.encrypt("1")
        await self.session.authorize(Ed25519Authority(TEST_SIGNING_SEED))
        self.clock.advance(DURATION - 1)
        self.assertEqual(self.session.decrypt(self.codec, ciphertext), Decimal(1))
        self.clock.advance(1)
        with self.assertRaisesRegex(Unauthorized, "expired"):
            self.session.decrypt(self.codec, ciphertext)

    async def test_rejection_maps_to_denied(self) -> None:
        authority = _RejectingAuthority()
        with self.assertRaises(DecryptionDenied):
            await self.session.authorize(authority)
        self.assertIsNone(self.session.proof)
        self.assertIs(self.session.state, RevealState.CHALLENGED)

    async def test_signer_failure_maps_to_failed(self) -> None:
        with self.assertRaises(DecryptionFailed) as caught:
            await self.session.authorize(_BrokenAuthority())
        self.assertTrue(caught.exception.retriable)

    async def test_wrong_signer_fails(self) -> None:
        with self.assertRaisesRegex(DecryptionFailed, "does not match"):
            await self.session.authorize(Ed25519Authority(OTHER_SIGNING_SEED))
        self.assertIsNone(self.session.proof)

    async def test_submit_validation(self) -> None:
        with self.assertRaisesRegex(DecryptionFailed, "no reveal challenge"):
            self.session.submit(b"\x00" * 64)
        self.session.challenge()
        with self.assertRaisesRegex(DecryptionFailed, "bytes"):
            self.session.submit("not-bytes")  # type: ignore[arg-type]
        with self.assertRaisesRegex(DecryptionFailed, "malformed"):
            self.session.submit(b"\x00" * 10)

    async def test_closed_window_fails(self) -> None:
        self.session.challenge()
        self.clock.advance(DURATION)
        with self.assertRaisesRegex(DecryptionFailed, "window"):
            await self.session.authorize(Ed25519Authority(TEST_SIGNING_SEED))

    async def test_close_clears_proof(self) -> None:
        await self.session.authorize(Ed25519Authority(TEST_SIGNING_SEED))
        self.session.close()
        self.assertIs(self.session.state, RevealState.UNAUTHENTICATED)
        self.assertIsNone(self.session.proof)


class TestRequireAuthorized(unittest.TestCase):
    def test_missing_proof(self) -> None:
        with self.assertRaisesRegex(Unauthorized, "requires"):
            require_authorized(None, now=TEST_NOW)

    def test_signed_proof_passes(self) -> None:
        proof = live_proof(TEST_NOW)
        self.assertIs(require_authorized(proof, now=TEST_NOW), proof)

    def test_forged_signature_rejected(self) -> None:
        forged = dataclasses.replace(live_proof(TEST_NOW), signature=b"\x00" * 64)
        with self.assertRaisesRegex(Unauthorized, "signature is invalid"):
            require_authorized(forged, now=TEST_NOW)
        with self.assertRaises(Unauthorized):
            ReferenceCodec().decrypt(ReferenceCodec().encrypt("12.5"), forged, now=TEST_NOW)

    def test_truncated_signature_rejected(self) -> None:
        truncated = dataclasses.replace(live_proof(TEST_NOW), signature=b"\x00" * 10)
        with self.assertRaisesRegex(Unauthorized, "malformed"):
            require_authorized(truncated, now=TEST_NOW)

    def test_proof_signed_by_someone_else_rejected(self) -> None:
        other = live_proof(TEST_NOW, seed=OTHER_SIGNING_SEED)
        borrowed = dataclasses.replace(live_proof(TEST_NOW), signature=other.signature)
        with self.assertRaises(Unauthorized):
            require_authorized(borrowed, now=TEST_NOW)

    def test_identity_must_match_challenge(self) -> None:
        swapped = dataclasses.replace(live_proof(TEST_NOW), identity=OTHER_IDENTITY)
        with self.assertRaisesRegex(Unauthorized, "identity"):
            require_authorized(swapped, now=TEST_NOW)


if __name__ == "__main__":
    unittest.main()
