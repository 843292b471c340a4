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

import base64
import unittest
from decimal import Decimal
from fractions import Fraction

from citycipher.core.errors import Unauthorized
from citycipher.crypto.codec import DecreaseByPercent, IncreaseByPercent, Scale
from citycipher.crypto.reference import REFERENCE_SCHEME_TAG, ReferenceCodec
from tests.test_support import TEST_NOW, live_proof


class TestOperations(unittest.TestCase):
    def test_factors(self) -> None:
        self.assertEqual(IncreaseByPercent(Decimal(10)).factor, Fraction(11, 10))
        self.assertEqual(DecreaseByPercent(Decimal(25))(Decimal(8)), Decimal(6))
        self.assertEqual(Scale(Decimal(2))(Decimal("1.5")), Decimal(3))

    def test_negative_percent_rejected(self) -> None:
        for op in (IncreaseByPercent, DecreaseByPercent):
            with self.subTest(op=op.__name__):
                with self.assertRaisesRegex(ValueError, "percent"):
                    op(Decimal(-1))

    def test_non_numeric_rejected(self) -> None:
        with self.assertRaises(ValueError):
            Scale("abc")
        with self.assertRaises(ValueError):
            IncreaseByPercent(True)


class TestReferenceCodec(unittest.TestCase):
    def setUp(self) -> None:
        self.codec = ReferenceCodec()
        self.proof = live_proof(TEST_NOW)

    def test_wire_format_is_tag_and_base64_text(self) -> None:
        ciphertext = self.codec.encrypt(Decimal("12.5"))
        expected = "FHE-" + base64.b64encode(b"12.5").decode("ascii")
        self.assertEqual(ciphertext.to_wire(), expected)
        self.assertEqual(ciphertext.scheme_tag, REFERENCE_SCHEME_TAG)

    def test_encrypt_is_deterministic(self) -> None:
        self.assertEqual(self.codec.encrypt("7.0"), self.codec.encrypt(Decimal(7)))

    def test_decrypt_round_trip(self) -> None:
        for value in ("0", "12.5", "-3.25", "1000000"):
            with self.subTest(value=value):
                ciphertext = self.codec.encrypt(Decimal(value))
                self.assertEqual(
                    self.codec.decrypt(ciphertext, self.proof, now=TEST_NOW), Decimal(value)
                )

    def test_compute_applies_operation(self) -> None:
        ciphertext = self.codec.compute(self.codec.encrypt("12.5"), IncreaseByPercent(Decimal(10)))
        self.assertEqual(self.codec.decrypt(ciphertext, self.proof, now=TEST_NOW), Decimal("13.75"))

    def test_decrypt_requires_proof(self) -> None:
        ciphertext = self.codec.encrypt("1")
        with self.assertRaises(Unauthorized):
            self.codec.decrypt(ciphertext, None, now=TEST_NOW)

    def test_load_accepts_wire_string(self) -> None:
        ciphertext = self.codec.encrypt("42.1")
        self.assertEqual(self.codec.load(ciphertext.to_wire()), ciphertext)

    def test_load_rejects_malformed_wire(self) -> None:
        cases = (
            42,
            "",
            "FHE",
            "PHE-" + base64.b64encode(b"1").decode("ascii"),
            "FHE-not*base64",
            "FHE-" + base64.b64encode(b"abc").decode("ascii"),
            "FHE-" + base64.b64encode(b"NaN").decode("ascii"),
            "FHE-" + "A" * 70_000,
        )
        for text in cases:
            with self.subTest(text=str(text)[:20]):
                with self.assertRaises(ValueError):
                    self.codec.load(text)

    def test_preview_truncates(self) -> None:
        ciphertext = self.codec.encrypt("123456789.123456789")
        self.assertTrue(ciphertext.preview(10).endswith("..."))
        self.assertEqual(len(ciphertext.preview(10)), 13)


if __name__ == "__main__":
    unittest.main()
