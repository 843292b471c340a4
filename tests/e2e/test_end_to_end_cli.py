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

import subprocess
import sys
import tempfile
import unittest
from pathlib import Path

from tests.test_support import build_cli_env

_CONFIG = """
[store]
path = "{store}"
address = "e2e"

[codec]
scheme = "paillier"
key_bits = 512

[reveal]
duration_seconds = 600
"""


class TestEndToEndCli(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.tmp_path = Path(self._tmp.name)
        self.repo_root = Path(__file__).resolve().parents[2]
        self.store_path = self.tmp_path / "city" / "store.cbor"
        self.config_path = self.tmp_path / "citycipher.toml"
        self.config_path.write_text(
            _CONFIG.format(store=self.store_path.as_posix()), encoding="utf-8"
        )
        self.env = build_cli_env(
            overrides={
                "XDG_CONFIG_HOME": str(self.tmp_path / "xdg-config"),
                "XDG_DATA_HOME": str(self.tmp_path / "xdg-data"),
            }
        )

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def _run(self, *args: str, stdin: str | None = None) -> subprocess.CompletedProcess[str]:
        return subprocess.run(
            [sys.executable, "-m", "citycipher", "--config", str(self.config_path), *args],
            cwd=self.repo_root,
            env=self.env,
            input=stdin,
            capture_output=True,
            text=True,
            check=False,
        )

    def test_policy_lifecycle_through_cli(self) -> None:
        keys = self._run("--quiet", "keys", "init")
        self.assertEqual(keys.returncode, 0, keys.stderr)
        identity = keys.stdout.strip()
        self.assertRegex(identity, r"^0x[0-9a-f]{64}$")
        key_dir = self.tmp_path / "xdg-data" / "citycipher" / "keys"
        self.assertTrue((key_dir / "signing.key").exists())
        self.assertTrue((key_dir / "paillier.key").exists())

        created = self._run("--quiet", "create", "--tax", "12.5", "--tariff", "7.0")
        self.assertEqual(created.returncode, 0, created.stderr)
        policy_id = created.stdout.strip()
        self.assertRegex(policy_id, r"^policy-\d+-[0-9a-z]{4}$")
        self.assertTrue(self.store_path.exists())

        listed = self._run("list")
        self.assertEqual(listed.returncode, 0, listed.stderr)
        self.assertIn("1 total", listed.stdout)
        self.assertIn("1 draft", listed.stdout)
        self.assertEqual(self._run("--quiet", "list").stdout.split(), [policy_id])
        self.assertEqual(self._run("--quiet", "list", "--status", "active").stdout.split(), [])

        activated = self._run("activate", policy_id)
        self.assertEqual(activated.returncode, 0, activated.stderr)
        self.assertIn(f"Activated policy {policy_id[:8]}", activated.stdout)

        shown = self._run("show", policy_id)
        self.assertEqual(shown.returncode, 0, shown.stderr)
        self.assertIn("PHE-", shown.stdout)
        self.assertNotIn("13.75", shown.stdout)

        revealed = self._run("show", policy_id, "--reveal", "--yes")
        self.assertEqual(revealed.returncode, 0, revealed.stderr)
        self.assertIn("13.75%", revealed.stdout)
        self.assertIn("7.7%", revealed.stdout)

        declined = self._run("show", policy_id, "--reveal", stdin="n\n")
        self.assertEqual(declined.returncode, 2)
        self.assertIn("Error:", declined.stderr)
        self.assertIn("rejected", declined.stderr)
        self.assertNotIn("13.75", declined.stdout)

        archived = self._run("archive", policy_id)
        self.assertEqual(archived.returncode, 0, archived.stderr)
        again = self._run("activate", policy_id)
        self.assertEqual(again.returncode, 2)
        self.assertIn("only draft policies can be activated (status: archived)", again.stderr)

    def test_keys_init_refuses_to_overwrite(self) -> None:
        self.assertEqual(self._run("--quiet", "keys", "init").returncode, 0)
        second = self._run("keys", "init")
        self.assertEqual(second.returncode, 2)
        self.assertIn("already exists", second.stderr)
        forced = self._run("--quiet", "keys", "init", "--force")
        self.assertEqual(forced.returncode, 0, forced.stderr)

    def test_missing_policy_is_an_error(self) -> None:
        self.assertEqual(self._run("--quiet", "keys", "init").returncode, 0)
        result = self._run("show", "policy-404")
        self.assertEqual(result.returncode, 2)
        self.assertIn("policy not found: policy-404", result.stderr)


if __name__ == "__main__":
    unittest.main()
