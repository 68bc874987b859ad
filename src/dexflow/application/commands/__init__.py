"""CLI command models and handlers"""

from .base import Command, ListCommand, StatusCommand, SubmitCommand

__all__ = ["Command", "SubmitCommand", "StatusCommand", "ListCommand"]
