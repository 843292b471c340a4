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

import typer

from ...config import build_paths, load_app_config
from ...crypto.paillier import encode_private_key, generate_paillier_keypair
from ...crypto.signing import encode_signing_key, generate_signing_keypair, identity_from_public_key
from ..api import build_kv_table, console, is_quiet
from ..core.common import _ctx_value, _run_cli
from ..core.log import _warn, configure_logging
from ..core.runtime import write_key_file

_KEYS_HELP = "Manage the local signing identity and encryption key."

_INIT_HELP = (
    "Generate an Ed25519 signing key and a Paillier keypair in the data directory.\n\n"
    "The signing key is your mayor identity. The Paillier key encrypts policy values\n"
    "and is required to reveal them. Existing keys are kept unless --force is given.\n\n"
    "Examples:\n"
    "  citycipher keys init\n"
    "  citycipher keys init --force\n"
)

keys_app = typer.Typer(add_completion=False, help=_KEYS_HELP, no_args_is_help=True)


def register(app: typer.Typer) -> None:
    app.add_typer(keys_app, name="keys")


@keys_app.command("init", help=_INIT_HELP)
def init(
    ctx: typer.Context,
    force: bool = typer.Option(
        False,
        "--force",
        help="Replace existing key files.",
        rich_help_panel="Behavior",
    ),
) -> None:
    config_value = _ctx_value(ctx, "config")
    debug_value = bool(_ctx_value(ctx, "debug"))
    quiet_value = bool(_ctx_value(ctx, "quiet"))

    def _run() -> None:
        config = load_app_config(config_value)
        configure_logging(config.logging.level, debug=debug_value, quiet=quiet_value)
        paths = build_paths()
        existing = [path for path in (paths.signing_key_path, paths.paillier_key_path) if path.exists()]
        if existing and not force:
            raise FileExistsError(f"{existing[0]} already exists (use --force to replace it)")
        if existing:
            _warn(
                "replacing " + ", ".join(str(path) for path in existing) + "; the old identity is lost",
                quiet=quiet_value,
            )
        seed, sign_pub = generate_signing_keypair()
        if not is_quiet():
            console.print(f"[dim]Generating {config.codec.key_bits}-bit Paillier key...[/dim]")
        paillier_key = generate_paillier_keypair(config.codec.key_bits)
        write_key_file(paths.signing_key_path, encode_signing_key(seed), force=force)
        write_key_file(paths.paillier_key_path, encode_private_key(paillier_key), force=force)
        identity = identity_from_public_key(sign_pub)
        if is_quiet():
            console.print(identity)
            return
        console.print(
            build_kv_table(
                [
                    ("Identity", identity),
                    ("Paillier key", f"{paillier_key.public.bits} bits, "
                     f"fingerprint {paillier_key.public.fingerprint().hex()}"),
                    ("Key directory", str(paths.keys_dir)),
                ],
                title="Keys ready",
            )
        )

    _run_cli(_run, debug=debug_value)
