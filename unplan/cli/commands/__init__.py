"""CLI command modules."""

from .plan import (
    cmd_plan,
    group_by_reason,
    plan_as_dict,
)
from .query import (
    cmd_list,
    cmd_rdepends,
)
