"""
Signature verification.
"""

from guichet.infrastructure.auth.signature_verifier import SignatureVerifier

__all__ = ["SignatureVerifier"]
