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

from collections.abc import Sequence
from datetime import datetime

from rich import box
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from ...core.models import PolicyRecord, Status, StatusCounts
from .state import UIContext, get_context, isatty

DEFAULT_CONTEXT = get_context()
THEME = DEFAULT_CONTEXT.theme
console = DEFAULT_CONTEXT.console
console_err = DEFAULT_CONTEXT.console_err

IMPACT_SPAN = 10


def _resolve_context(context: UIContext | None) -> UIContext:
    return context or DEFAULT_CONTEXT


def configure_ui(
    *,
    no_color: bool,
    quiet: bool = False,
    context: UIContext | None = None,
) -> None:
    context = _resolve_context(context)
    context.quiet = quiet
    context.console.no_color = no_color
    context.console_err.no_color = no_color


def is_quiet(context: UIContext | None = None) -> bool:
    return _resolve_context(context).quiet


def format_status(status: Status) -> Text:
    return Text(status.value.capitalize(), style=f"status.{status.value}")


def format_timestamp(created_at: int) -> str:
    return datetime.fromtimestamp(created_at).strftime("%Y-%m-%d %H:%M")


def impact_meter(value: int, *, span: int = IMPACT_SPAN) -> Text:
    """Signed bar, e.g. ``+++..  +3``; values beyond ``span`` are drawn full."""
    filled = min(abs(value), span)
    if value > 0:
        style, mark = "impact.positive", "+"
    elif value < 0:
        style, mark = "impact.negative", "-"
    else:
        style, mark = "impact.neutral", " "
    meter = Text(mark * filled, style=style)
    meter.append("." * (span - filled), style="muted")
    meter.append(f" {value:+d}", style=style)
    return meter


def build_policy_table(records: Sequence[PolicyRecord], *, title: str | None = None) -> Table:
    table = Table(title=title, box=box.SIMPLE_HEAVY, show_lines=False)
    table.add_column("ID", style="accent", no_wrap=True)
    table.add_column("Mayor", no_wrap=True)
    table.add_column("Created", style="muted", no_wrap=True)
    table.add_column("Happiness", no_wrap=True)
    table.add_column("Revenue", no_wrap=True)
    table.add_column("Status", no_wrap=True)
    for record in records:
        table.add_row(
            record.id,
            record.short_owner(),
            format_timestamp(record.created_at),
            impact_meter(record.happiness_impact),
            impact_meter(record.revenue_impact),
            format_status(record.status),
        )
    return table


def build_counts_line(counts: StatusCounts) -> Text:
    line = Text(f"{counts.total} total", style="bold")
    line.append("  ")
    line.append(f"{counts.draft} draft", style="status.draft")
    line.append("  ")
    line.append(f"{counts.active} active", style="status.active")
    line.append("  ")
    line.append(f"{counts.archived} archived", style="status.archived")
    return line


def build_kv_table(rows: Sequence[tuple[str, object]], *, title: str | None = None) -> Table:
    table = Table(title=title, show_header=False, box=box.SIMPLE, show_lines=False)
    table.add_column("Field", style="bold", no_wrap=True)
    table.add_column("Value")
    for key, value in rows:
        table.add_row(str(key), value if isinstance(value, Text) else str(value))
    return table


def build_policy_details(record: PolicyRecord) -> Table:
    return build_kv_table(
        [
            ("ID", record.id),
            ("Mayor", record.owner),
            ("Created", format_timestamp(record.created_at)),
            ("Status", format_status(record.status)),
            ("Happiness", impact_meter(record.happiness_impact)),
            ("Revenue", impact_meter(record.revenue_impact)),
            ("Tax rate", record.encrypted_tax_rate.preview()),
            ("Trade tariff", record.encrypted_tariff.preview()),
        ]
    )


def panel(title: str, renderable, *, style: str = "panel") -> Panel:
    return Panel(
        renderable,
        title=title,
        title_align="left",
        border_style=style,
        box=box.ROUNDED,
        padding=(1, 2),
    )


__all__ = [
    "THEME",
    "UIContext",
    "build_counts_line",
    "build_kv_table",
    "build_policy_details",
    "build_policy_table",
    "configure_ui",
    "console",
    "console_err",
    "format_status",
    "format_timestamp",
    "impact_meter",
    "is_quiet",
    "isatty",
    "panel",
]
