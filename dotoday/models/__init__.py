from .goal import Goal
from .completion import Completion

__all__ = [
    "Goal",
    "Completion",
]
