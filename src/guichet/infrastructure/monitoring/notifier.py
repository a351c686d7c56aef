"""
Notifiers for action outcomes.
"""

import logging

import click

from guichet.domain.services.i_notifier import INotifier

logger = logging.getLogger(__name__)


class LoggingNotifier(INotifier):
    """Notifier that writes outcomes to the application log."""

    def success(self, text: str) -> None:
        logger.info(text, extra={"notification": "success"})

    def error(self, text: str) -> None:
        logger.error(text, extra={"notification": "error"})


class ConsoleNotifier(INotifier):
    """Notifier that echoes outcomes to the terminal (CLI)."""

    def success(self, text: str) -> None:
        click.secho(f"✓ {text}", fg="green")

    def error(self, text: str) -> None:
        click.secho(f"✗ {text}", fg="red", err=True)
