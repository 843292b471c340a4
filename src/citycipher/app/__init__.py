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

"""Application state and mayor-facing operations."""

from .state import (
    ActionHistory,
    AppState,
    IdentityProvider,
    RevealedValues,
    RevealSettings,
    StaticIdentityProvider,
    activate_policy,
    archive_policy,
    close_reveal_session,
    open_reveal_session,
    require_identity,
    reveal_policy,
    submit_policy,
)

__all__ = [
    "ActionHistory",
    "AppState",
    "IdentityProvider",
    "RevealSettings",
    "RevealedValues",
    "StaticIdentityProvider",
    "activate_policy",
    "archive_policy",
    "close_reveal_session",
    "open_reveal_session",
    "require_identity",
    "reveal_policy",
    "submit_policy",
]
