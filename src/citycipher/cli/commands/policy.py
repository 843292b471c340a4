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

from ...app import activate_policy, archive_policy, reveal_policy, submit_policy
from ...core.validation import require_decimal
from ...policy import count_by_status, filter_policies
from ..api import (
    build_counts_line,
    build_kv_table,
    build_policy_details,
    build_policy_table,
    console,
    is_quiet,
)
from ..core.common import _ctx_value, _run_cli
from ..core.reveal import ConfirmingAuthority
from ..core.runtime import load_runtime, run_async

_CREATE_HELP = (
    "Encrypt a tax rate and a trade tariff and store them as a draft policy.\n\n"
    "Examples:\n"
    "  citycipher create --tax 12.5 --tariff 7\n"
)
_LIST_HELP = (
    "List stored policies, newest first.\n\n"
    "Examples:\n"
    "  citycipher list\n"
    "  citycipher list --search 0xab --status active\n"
)
_SHOW_HELP = (
    "Show one policy. Values stay encrypted unless --reveal is given.\n\n"
    "Revealing asks you to sign a reveal request with your local key; --yes signs\n"
    "without asking.\n"
)
_ACTIVATE_HELP = "Activate one of your draft policies (raises its tax rate and tariff by 10%)."
_ARCHIVE_HELP = "Archive one of your policies."


def register(app: typer.Typer) -> None:
    app.command("create", help=_CREATE_HELP)(create)
    app.command("list", help=_LIST_HELP)(list_policies)
    app.command("show", help=_SHOW_HELP)(show)
    app.command("activate", help=_ACTIVATE_HELP)(activate)
    app.command("archive", help=_ARCHIVE_HELP)(archive)


def _globals(ctx: typer.Context) -> tuple[str | None, bool, bool]:
    return (
        _ctx_value(ctx, "config"),
        bool(_ctx_value(ctx, "debug")),
        bool(_ctx_value(ctx, "quiet")),
    )


def create(
    ctx: typer.Context,
    tax: str = typer.Option(..., "--tax", help="Tax rate in percent.", rich_help_panel="Policy"),
    tariff: str = typer.Option(
        ...,
        "--tariff",
        help="Trade tariff in percent.",
        rich_help_panel="Policy",
    ),
) -> None:
    config_value, debug_value, quiet_value = _globals(ctx)

    def _run() -> None:
        tax_rate = require_decimal(tax, label="tax rate")
        trade_tariff = require_decimal(tariff, label="tariff")
        runtime = load_runtime(config_value, debug=debug_value, quiet=quiet_value)
        record = run_async(submit_policy(runtime.state, tax_rate, trade_tariff))
        if is_quiet():
            console.print(record.id, highlight=False)
            return
        console.print(runtime.state.history.entries()[0], style="success", highlight=False)
        console.print(build_policy_details(record))

    _run_cli(_run, debug=debug_value)


def list_policies(
    ctx: typer.Context,
    search: str = typer.Option(
        "",
        "--search",
        "-s",
        help="Match a substring of the policy id or mayor.",
        rich_help_panel="Filter",
    ),
    status: str = typer.Option(
        "all",
        "--status",
        help="all, draft, active or archived.",
        rich_help_panel="Filter",
    ),
) -> None:
    config_value, debug_value, quiet_value = _globals(ctx)

    def _run() -> None:
        runtime = load_runtime(config_value, debug=debug_value, quiet=quiet_value)
        repository = runtime.state.repository
        records = run_async(repository.list())
        matches = filter_policies(records, term=search, status=status)
        if is_quiet():
            for record in matches:
                console.print(record.id, highlight=False)
            return
        if not matches:
            console.print("[muted]No policies found.[/muted]")
        else:
            console.print(build_policy_table(matches))
        console.print(build_counts_line(count_by_status(records)))

    _run_cli(_run, debug=debug_value)


def show(
    ctx: typer.Context,
    policy_id: str = typer.Argument(..., help="Policy id."),
    reveal: bool = typer.Option(
        False,
        "--reveal",
        help="Decrypt the tax rate and tariff (needs a signature).",
        rich_help_panel="Reveal",
    ),
    yes: bool = typer.Option(
        False,
        "--yes",
        "-y",
        help="Sign the reveal request without asking.",
        rich_help_panel="Reveal",
    ),
) -> None:
    config_value, debug_value, quiet_value = _globals(ctx)

    def _run() -> None:
        runtime = load_runtime(config_value, debug=debug_value, quiet=quiet_value)
        state = runtime.state
        record = run_async(state.repository.get(policy_id))
        console.print(build_policy_details(record))
        if not reveal:
            return
        authority = ConfirmingAuthority(runtime.seed, assume_yes=yes)
        values = run_async(reveal_policy(state, record.id, authority))
        console.print(
            build_kv_table(
                [("Tax rate", f"{values.tax_rate}%"), ("Trade tariff", f"{values.tariff}%")],
                title="Revealed",
            )
        )

    _run_cli(_run, debug=debug_value)


def activate(
    ctx: typer.Context,
    policy_id: str = typer.Argument(..., help="Policy id."),
) -> None:
    config_value, debug_value, quiet_value = _globals(ctx)

    def _run() -> None:
        runtime = load_runtime(config_value, debug=debug_value, quiet=quiet_value)
        run_async(activate_policy(runtime.state, policy_id))
        if not is_quiet():
            console.print(runtime.state.history.entries()[0], style="success", highlight=False)

    _run_cli(_run, debug=debug_value)


def archive(
    ctx: typer.Context,
    policy_id: str = typer.Argument(..., help="Policy id."),
) -> None:
    config_value, debug_value, quiet_value = _globals(ctx)

    def _run() -> None:
        runtime = load_runtime(config_value, debug=debug_value, quiet=quiet_value)
        run_async(archive_policy(runtime.state, policy_id))
        if not is_quiet():
            console.print(runtime.state.history.entries()[0], style="success", highlight=False)

    _run_cli(_run, debug=debug_value)
