"""
Local wallet adapters.
"""

from guichet.infrastructure.wallet.keypair_signing_agent import (
    KeypairSigningAgent,
    load_keypair,
)

__all__ = ["KeypairSigningAgent", "load_keypair"]
