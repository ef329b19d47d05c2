"""
Client-side session and task state controller for a shared task board.
"""

from .controller import TaskboardController

__all__ = ["TaskboardController"]
