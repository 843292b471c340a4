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

from .lifecycle import (
    ImpactScorer,
    RandomImpactScorer,
    Transition,
    activate,
    apply_transition,
    archive,
    create_policy,
    new_policy_id,
)
from .repository import PolicyRepository, count_by_status, filter_policies

__all__ = [
    "ImpactScorer",
    "PolicyRepository",
    "RandomImpactScorer",
    "Transition",
    "activate",
    "apply_transition",
    "archive",
    "count_by_status",
    "create_policy",
    "filter_policies",
    "new_policy_id",
]
