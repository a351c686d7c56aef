"""
Solana RPC client with resilience patterns.

Features:
- Circuit Breaker (stop hammering a failing endpoint)
- Retry with exponential backoff for transport failures
- Timeout protection per call
"""

import asyncio
import base64
import logging
from typing import Any, Dict, Optional, Sequence

import aiohttp
from solders.pubkey import Pubkey

from guichet.config.settings import GuichetConfig, get_settings
from guichet.domain.entities.prepared_transaction import (
    RecencyToken,
    SubmissionHandle,
)
from guichet.domain.exceptions import RPCError
from guichet.domain.services.i_rpc_client import IRpcClient
from guichet.infrastructure.blockchain.constants import TOKEN_PROGRAM
from guichet.infrastructure.resilience import (
    CircuitBreaker,
    CircuitBreakerConfig,
    Retry,
    RetryConfig,
    RetryError,
)

logger = logging.getLogger(__name__)


class RPCTransportError(RPCError):
    """Connection or timeout failure. Safe to retry."""


class SolanaRPCClient(IRpcClient):
    """
    Solana JSON-RPC client with circuit breaker and retry logic.

    Resilience features:
    - Circuit breaker opens after repeated transport failures
    - Automatic retry with exponential backoff on transport failures
    - JSON-RPC error objects are surfaced immediately as RPCError
    """

    def __init__(
        self,
        rpc_url: Optional[str] = None,
        settings: Optional[GuichetConfig] = None,
    ):
        """
        Initialize Solana RPC client.

        Args:
            rpc_url: Optional RPC URL. If None, uses settings.
            settings: Optional settings. If None, uses the global settings.
        """
        self._settings = settings or get_settings()
        self.rpc_url = rpc_url or self._settings.resolved_rpc_url
        self.commitment = self._settings.commitment

        resilience = self._settings.resilience
        self.circuit_breaker = CircuitBreaker(
            name="solana_rpc",
            config=CircuitBreakerConfig(
                failure_threshold=resilience.circuit_breaker.failure_threshold,
                success_threshold=resilience.circuit_breaker.success_threshold,
                timeout=resilience.circuit_breaker.timeout,
                expected_exceptions=(RPCTransportError, RetryError),
            ),
        )
        self.retry = Retry(
            name="rpc_query",
            config=RetryConfig(
                max_attempts=resilience.retry.max_attempts,
                initial_delay=resilience.retry.initial_delay,
                max_delay=resilience.retry.max_delay,
                backoff_multiplier=resilience.retry.backoff_multiplier,
                jitter=resilience.retry.jitter,
                retry_on=(RPCTransportError,),
            ),
        )
        self.timeout = aiohttp.ClientTimeout(
            total=resilience.timeouts.rpc_call,
            connect=resilience.timeouts.connect,
        )
        self._session: Optional[aiohttp.ClientSession] = None
        self._request_id = 0

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create HTTP session."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self.timeout)
        return self._session

    async def close(self) -> None:
        """Close the HTTP session."""
        if self._session and not self._session.closed:
            await self._session.close()
        self._session = None

    async def __aenter__(self) -> "SolanaRPCClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def call_rpc(
        self,
        method: str,
        params: Optional[list] = None,
        retry: bool = True,
    ) -> Any:
        """
        Call Solana RPC method with resilience.

        Args:
            method: RPC method name
            params: Optional method parameters
            retry: Retry transport failures (disable for non-idempotent calls)

        Returns:
            The "result" member of the RPC response

        Raises:
            RPCError: On RPC error or exhausted retries
            CircuitBreakerOpenError: If circuit is open
        """
        if retry:
            return await self.circuit_breaker.call_async(
                self.retry.execute_async,
                self._call_rpc_inner,
                method,
                params,
            )
        return await self.circuit_breaker.call_async(
            self._call_rpc_inner, method, params
        )

    async def _call_rpc_inner(
        self,
        method: str,
        params: Optional[list] = None,
    ) -> Any:
        """Inner RPC call implementation."""
        self._request_id += 1
        payload = {
            "jsonrpc": "2.0",
            "id": self._request_id,
            "method": method,
            "params": params or [],
        }

        session = await self._get_session()
        try:
            async with session.post(self.rpc_url, json=payload) as response:
                response.raise_for_status()
                data = await response.json()
        except aiohttp.ClientError as e:
            raise RPCTransportError(
                f"RPC connection error: {e}",
                details={"method": method},
            ) from e
        except asyncio.TimeoutError as e:
            raise RPCTransportError(
                f"RPC timeout: {method}",
                details={"method": method, "timeout": self.timeout.total},
            ) from e

        if "error" in data:
            error = data["error"] or {}
            raise RPCError(
                f"RPC error: {error.get('message', error)}",
                details={"method": method, "error": error},
            )

        return data.get("result")

    async def get_balance(self, pubkey: Pubkey) -> int:
        """
        Get account balance.

        Args:
            pubkey: Public key

        Returns:
            Balance in lamports
        """
        result = await self.call_rpc(
            "getBalance", [str(pubkey), {"commitment": self.commitment}]
        )
        return int(result["value"])

    async def enumerate_token_accounts(self, owner: Pubkey) -> list[Dict[str, Any]]:
        """
        List SPL token accounts owned by owner.

        Args:
            owner: Owner public key

        Returns:
            jsonParsed account records
        """
        result = await self.call_rpc(
            "getTokenAccountsByOwner",
            [
                str(owner),
                {"programId": str(TOKEN_PROGRAM)},
                {"encoding": "jsonParsed", "commitment": self.commitment},
            ],
        )
        return list(result.get("value", []))

    async def get_latest_recency_token(self) -> RecencyToken:
        """Fetch latest blockhash."""
        result = await self.call_rpc(
            "getLatestBlockhash", [{"commitment": self.commitment}]
        )
        value = result["value"]
        return RecencyToken(
            blockhash=value["blockhash"],
            last_valid_block_height=int(value["lastValidBlockHeight"]),
        )

    async def get_status(
        self, handles: Sequence[SubmissionHandle]
    ) -> list[Optional[Dict[str, Any]]]:
        """
        Query signature statuses.

        Args:
            handles: Submission handles

        Returns:
            Status dicts aligned with handles (None when unknown)
        """
        result = await self.call_rpc(
            "getSignatureStatuses",
            [[h.signature for h in handles], {"searchTransactionHistory": False}],
        )
        statuses = list(result.get("value") or [])
        # Pad so callers can index by handle position
        statuses.extend([None] * (len(handles) - len(statuses)))
        return statuses

    async def submit(self, serialized_transaction: bytes) -> SubmissionHandle:
        """
        Submit a signed transaction.

        Resending identical signed bytes is deduplicated by the ledger, so
        transport failures are retried.
        """
        encoded = base64.b64encode(serialized_transaction).decode("ascii")
        signature = await self.call_rpc(
            "sendTransaction",
            [
                encoded,
                {"encoding": "base64", "preflightCommitment": self.commitment},
            ],
        )
        logger.info(f"Transaction submitted: {signature}")
        return SubmissionHandle(signature=str(signature))

    async def request_airdrop(self, pubkey: Pubkey, lamports: int) -> SubmissionHandle:
        """Request an airdrop. Not retried: a retry could fund twice."""
        signature = await self.call_rpc(
            "requestAirdrop",
            [str(pubkey), lamports, {"commitment": self.commitment}],
            retry=False,
        )
        logger.info(f"Airdrop requested: {lamports} lamports to {pubkey}")
        return SubmissionHandle(signature=str(signature))

    async def account_exists(self, pubkey: Pubkey) -> bool:
        """Check whether an account exists on chain."""
        result = await self.call_rpc(
            "getAccountInfo",
            [str(pubkey), {"encoding": "base64", "commitment": self.commitment}],
        )
        return result.get("value") is not None
