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

import unittest

from citycipher.core.errors import (
    CityCipherError,
    DecryptionDenied,
    DecryptionFailed,
    ParseError,
    RecordNotFound,
    Unauthorized,
)
from citycipher.core.models import Status, StatusCounts
from tests.test_support import make_record


class TestModels(unittest.TestCase):
    def test_status_terminal(self) -> None:
        self.assertFalse(Status.DRAFT.terminal)
        self.assertFalse(Status.ACTIVE.terminal)
        self.assertTrue(Status.ARCHIVED.terminal)

    def test_short_forms(self) -> None:
        record = make_record("policy-1700000000000-abcd", owner="0x" + "ab" * 32)
        self.assertEqual(record.short_id(), "policy-1")
        self.assertEqual(record.short_owner(), "0xabab...abab")
        self.assertEqual(make_record(owner="0xA").short_owner(), "0xA")

    def test_status_counts(self) -> None:
        records = [
            make_record("policy-1"),
            make_record("policy-2", status=Status.ACTIVE),
            make_record("policy-3", status=Status.ACTIVE),
            make_record("policy-4", status=Status.ARCHIVED),
        ]
        self.assertEqual(
            StatusCounts.from_records(records),
            StatusCounts(total=4, draft=1, active=2, archived=1),
        )
        self.assertEqual(StatusCounts.from_records([]), StatusCounts(0, 0, 0, 0))


class TestErrors(unittest.TestCase):
    def test_hierarchy(self) -> None:
        self.assertTrue(issubclass(RecordNotFound, LookupError))
        self.assertTrue(issubclass(ParseError, ValueError))
        self.assertTrue(issubclass(Unauthorized, PermissionError))
        for cls in (RecordNotFound, ParseError, Unauthorized, DecryptionDenied):
            with self.subTest(cls=cls.__name__):
                self.assertTrue(issubclass(cls, CityCipherError))

    def test_only_failed_reveal_is_retriable(self) -> None:
        self.assertTrue(DecryptionFailed("x").retriable)
        self.assertFalse(DecryptionDenied("x").retriable)

    def test_messages(self) -> None:
        self.assertEqual(str(RecordNotFound("policy-1")), "policy not found: policy-1")
        self.assertEqual(str(ParseError("bad", key="policy_x")), "policy_x: bad")
        self.assertEqual(ParseError("bad").key, None)


if __name__ == "__main__":
    unittest.main()
