"""
Application use cases.
"""

from guichet.application.use_cases.get_native_balance import GetNativeBalance
from guichet.application.use_cases.list_token_holdings import (
    ListTokenHoldings,
    parse_token_account,
)
from guichet.application.use_cases.request_airdrop import RequestAirdrop
from guichet.application.use_cases.send_native_transfer import SendNativeTransfer
from guichet.application.use_cases.send_token_transfer import SendTokenTransfer
from guichet.application.use_cases.sign_message import SignMessage

__all__ = [
    "GetNativeBalance",
    "ListTokenHoldings",
    "parse_token_account",
    "RequestAirdrop",
    "SendNativeTransfer",
    "SendTokenTransfer",
    "SignMessage",
]
