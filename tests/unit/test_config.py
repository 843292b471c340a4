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

import tempfile
import unittest
from pathlib import Path

from citycipher.config import (
    DEFAULT_CONFIG_PATH,
    build_paths,
    init_user_config,
    load_app_config,
    resolve_config_path,
    user_config_needs_init,
)
from tests.test_support import isolated_user_dirs


def _write_config(tmpdir: str, text: str) -> Path:
    path = Path(tmpdir) / "config.toml"
    path.write_text(text, encoding="utf-8")
    return path


class TestConfig(unittest.TestCase):
    def test_packaged_default_matches_dataclass_defaults(self) -> None:
        with isolated_user_dirs():
            config = load_app_config()
            self.assertEqual(config.source_path, DEFAULT_CONFIG_PATH)
            self.assertIsNone(config.store.path)
            self.assertEqual(config.store.address, "local")
            self.assertEqual(config.reveal.network_id, 0)
            self.assertEqual(config.reveal.duration_seconds, 2_592_000)
            self.assertEqual(config.codec.scheme, "paillier")
            self.assertEqual(config.codec.key_bits, 2048)
            self.assertEqual(config.policy.id_attempts, 5)
            self.assertEqual(config.logging.level, "warning")
            self.assertEqual(config.store_path, build_paths().store_path)

    def test_load_app_config_parses_sections(self) -> None:
        toml = """
[store]
path = "~/city/store.cbor"
address = "0xStore"

[network]
id = "31337"

[reveal]
duration_seconds = 60

[codec]
scheme = "Reference"
key_bits = 1024

[policy]
id_attempts = 2

[logging]
level = "DEBUG"
"""
        with tempfile.TemporaryDirectory() as tmpdir:
            config = load_app_config(path=_write_config(tmpdir, toml))

        self.assertEqual(config.store.path, Path("~/city/store.cbor").expanduser())
        self.assertEqual(config.store_path, config.store.path)
        self.assertEqual(config.store.address, "0xStore")
        self.assertEqual(config.reveal.network_id, 31337)
        self.assertEqual(config.reveal.duration_seconds, 60)
        self.assertEqual(config.codec.scheme, "reference")
        self.assertEqual(config.codec.key_bits, 1024)
        self.assertEqual(config.policy.id_attempts, 2)
        self.assertEqual(config.logging.level, "debug")

    def test_empty_file_uses_defaults(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            config = load_app_config(path=_write_config(tmpdir, ""))
        self.assertEqual(config.codec.scheme, "paillier")
        self.assertEqual(config.reveal.duration_seconds, 2_592_000)

    def test_invalid_values_name_the_field(self) -> None:
        cases = {
            "[codec]\nkey_bits = 256\n": "codec.key_bits",
            "[codec]\nkey_bits = true\n": "codec.key_bits",
            "[codec]\nscheme = \"rsa\"\n": "codec.scheme",
            "[reveal]\nduration_seconds = 0\n": "reveal.duration_seconds",
            "[network]\nid = -1\n": "network.id",
            "[network]\nid = \"x\"\n": "network.id",
            "[policy]\nid_attempts = 0\n": "policy.id_attempts",
            "[logging]\nlevel = \"loud\"\n": "logging.level",
            "[store]\naddress = 5\n": "store.address",
            "store = 1\n": "store",
        }
        for text, field in cases.items():
            with self.subTest(field=field, text=text):
                with tempfile.TemporaryDirectory() as tmpdir:
                    with self.assertRaisesRegex(ValueError, field):
                        load_app_config(path=_write_config(tmpdir, text))


class TestConfigInstaller(unittest.TestCase):
    def test_paths_follow_xdg_overrides(self) -> None:
        with isolated_user_dirs() as root:
            paths = build_paths()
            self.assertEqual(paths.user_config_dir, root / "config" / "citycipher")
            self.assertEqual(paths.user_data_dir, root / "data" / "citycipher")
            self.assertEqual(paths.store_path, root / "data" / "citycipher" / "store.cbor")
            self.assertEqual(paths.signing_key_path.parent, paths.keys_dir)

    def test_init_user_config_copies_default_once(self) -> None:
        with isolated_user_dirs():
            self.assertTrue(user_config_needs_init())
            self.assertEqual(resolve_config_path(), DEFAULT_CONFIG_PATH)
            config_dir = init_user_config()
            user_file = config_dir / "config.toml"
            self.assertEqual(user_file.read_bytes(), DEFAULT_CONFIG_PATH.read_bytes())
            self.assertFalse(user_config_needs_init())
            self.assertEqual(resolve_config_path(), user_file)

            user_file.write_text("[network]\nid = 9\n", encoding="utf-8")
            init_user_config()
            self.assertEqual(load_app_config().reveal.network_id, 9)

    def test_explicit_path_wins(self) -> None:
        with isolated_user_dirs():
            init_user_config()
            self.assertEqual(resolve_config_path("~/x.toml"), Path("~/x.toml").expanduser())


if __name__ == "__main__":
    unittest.main()
