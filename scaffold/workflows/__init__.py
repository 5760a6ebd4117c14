"""Side-effecting package workflows built on the generation engine."""

from scaffold.workflows.lib_new import LibNew, LibNewOptions
from scaffold.workflows.lib_refresh import LibRefresh, LibRefreshOptions, RefreshStepResult

__all__ = [
    "LibNew",
    "LibNewOptions",
    "LibRefresh",
    "LibRefreshOptions",
    "RefreshStepResult",
]
