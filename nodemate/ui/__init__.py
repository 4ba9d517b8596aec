"""Terminal presentation: rich output and prompt_toolkit input."""

from .common import error_hint
from .input import InputManager
from .presenter import Presenter

__all__ = ["InputManager", "Presenter", "error_hint"]
