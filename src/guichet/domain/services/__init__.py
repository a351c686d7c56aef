"""
Domain service interfaces.
"""

from guichet.domain.services.i_notifier import INotifier
from guichet.domain.services.i_rpc_client import IRpcClient
from guichet.domain.services.i_signing_agent import (
    CanSign,
    ISigningAgent,
    MessageSigner,
    NoSigning,
    SigningCapability,
    resolve_message_signer,
)

__all__ = [
    "INotifier",
    "IRpcClient",
    "ISigningAgent",
    "SigningCapability",
    "MessageSigner",
    "NoSigning",
    "CanSign",
    "resolve_message_signer",
]
