"""
Test fixtures and configuration.
"""

from unittest.mock import AsyncMock

import pytest
from helpers.fakes import CONFIRMED_STATUS, FakeClock, RecordingNotifier
from solders.hash import Hash
from solders.keypair import Keypair
from solders.pubkey import Pubkey

from guichet.config.settings import reset_settings
from guichet.domain.entities.prepared_transaction import (
    RecencyToken,
    SubmissionHandle,
)
from guichet.domain.services.i_rpc_client import IRpcClient


@pytest.fixture(autouse=True)
def _reset_settings():
    """Each test starts without a cached settings singleton."""
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def wallet_keypair() -> Keypair:
    return Keypair()


@pytest.fixture
def recipient() -> str:
    return str(Keypair().pubkey())


@pytest.fixture
def mint() -> str:
    return str(Pubkey.new_unique())


@pytest.fixture
def recency_token() -> RecencyToken:
    return RecencyToken(blockhash=str(Hash.default()), last_valid_block_height=1000)


@pytest.fixture
def rpc_client(recency_token) -> AsyncMock:
    """RPC client double whose transactions confirm on the first query."""
    client = AsyncMock(spec=IRpcClient)
    client.get_balance.return_value = 2_000_000_000
    client.enumerate_token_accounts.return_value = []
    client.get_latest_recency_token.return_value = recency_token
    client.submit.return_value = SubmissionHandle("sig-transfer")
    client.request_airdrop.return_value = SubmissionHandle("sig-airdrop")
    client.get_status.return_value = [CONFIRMED_STATUS]
    client.account_exists.return_value = True
    return client
