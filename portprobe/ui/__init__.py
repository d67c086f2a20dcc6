from .console import ConsoleUI
from .view import ViewAction, ViewState, apply_action, filter_results, step, visible_rows

__all__ = [
    "ConsoleUI",
    "ViewAction",
    "ViewState",
    "apply_action",
    "filter_results",
    "step",
    "visible_rows",
]
