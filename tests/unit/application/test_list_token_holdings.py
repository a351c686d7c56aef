"""
Unit tests for ListTokenHoldings use case.

Usage:
    pytest tests/unit/application/test_list_token_holdings.py
"""

import pytest
from helpers.fakes import token_account_record
from solders.pubkey import Pubkey

from guichet.application.use_cases.list_token_holdings import (
    ListTokenHoldings,
    parse_token_account,
)
from guichet.domain.entities.wallet_state import WalletState
from guichet.domain.exceptions import InvalidRecipientError


class TestListTokenHoldings:
    """Unit tests for ListTokenHoldings."""

    async def test_materializes_holdings(self, rpc_client, recipient):
        mint_a, mint_b = str(Pubkey.new_unique()), str(Pubkey.new_unique())
        rpc_client.enumerate_token_accounts.return_value = [
            token_account_record(mint_a, recipient, "1500000", 6),
            token_account_record(mint_b, recipient, "18446744073709551615", 9),
        ]

        holdings = await ListTokenHoldings(rpc_client).execute(recipient)

        assert [h.mint for h in holdings] == [mint_a, mint_b]
        assert holdings[0].display_text == "1.5"
        assert holdings[1].raw_amount == 2**64 - 1
        rpc_client.enumerate_token_accounts.assert_awaited_once_with(
            Pubkey.from_string(recipient)
        )

    async def test_zero_balances_included_by_default(self, rpc_client, recipient):
        rpc_client.enumerate_token_accounts.return_value = [
            token_account_record(str(Pubkey.new_unique()), recipient, "0", 6),
        ]

        assert len(await ListTokenHoldings(rpc_client).execute(recipient)) == 1
        assert (
            await ListTokenHoldings(rpc_client).execute(recipient, include_empty=False)
            == ()
        )

    async def test_malformed_records_skipped(self, rpc_client, recipient):
        good_mint = str(Pubkey.new_unique())
        rpc_client.enumerate_token_accounts.return_value = [
            {"pubkey": "broken", "account": {"data": "base64-blob"}},
            token_account_record(good_mint, recipient, "not-a-number", 6),
            token_account_record(good_mint, recipient, "7", 0),
        ]

        holdings = await ListTokenHoldings(rpc_client).execute(recipient)

        assert [h.raw_amount for h in holdings] == [7]

    async def test_refresh_replaces_stale_mint(self, rpc_client, recipient):
        """Test a second enumeration replaces, never merges, the snapshot."""
        m1, m2 = str(Pubkey.new_unique()), str(Pubkey.new_unique())
        use_case = ListTokenHoldings(rpc_client)
        state = WalletState(owner=recipient)

        rpc_client.enumerate_token_accounts.return_value = [
            token_account_record(m1, recipient, "5", 0)
        ]
        state.replace_holdings(await use_case.execute(recipient))

        rpc_client.enumerate_token_accounts.return_value = [
            token_account_record(m2, recipient, "9", 0)
        ]
        state.replace_holdings(await use_case.execute(recipient))

        assert [h.mint for h in state.holdings] == [m2]

    async def test_invalid_owner_makes_no_call(self, rpc_client):
        with pytest.raises(InvalidRecipientError):
            await ListTokenHoldings(rpc_client).execute("nope")
        rpc_client.enumerate_token_accounts.assert_not_awaited()

    def test_parse_token_account_keeps_account_address(self, recipient):
        record = token_account_record("M", recipient, "3", 2, pubkey="ACCOUNT")
        holding = parse_token_account(record)
        assert holding.token_account == "ACCOUNT"
        assert holding.decimals == 2
