"""Data models for controller state."""

from .state import LedState
