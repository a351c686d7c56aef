"""
Notifier interface.

Receives transient outcome notifications for the presentation layer.
"""

from abc import ABC, abstractmethod


class INotifier(ABC):
    """Abstract interface for user-facing notifications."""

    @abstractmethod
    def success(self, text: str) -> None:
        """Report a successful action."""

    @abstractmethod
    def error(self, text: str) -> None:
        """Report a failed action."""
