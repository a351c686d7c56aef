"""
Application services.
"""

from guichet.application.services.action_slot import ActionSlot, ActionSlots
from guichet.application.services.confirmation_poller import ConfirmationPoller

__all__ = ["ActionSlot", "ActionSlots", "ConfirmationPoller"]
