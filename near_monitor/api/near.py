"""
NEAR API Client

Single responsibility: communicate with the NEAR JSON-RPC endpoint and the
NearBlocks indexer API.
"""

import asyncio
import logging
import time
from typing import Any, List, Optional

import aiohttp

from ..config import config
from ..errors import NearAPIError
from ..models import Transaction

logger = logging.getLogger(__name__)


class NearClient:
    """
    Async client for NEAR balances and transaction history.

    Handles:
    - Fetching the current balance of an account (RPC view_account)
    - Fetching recent transactions (NearBlocks)
    - Concurrency control, timeouts and retries
    """

    def __init__(
        self,
        rpc_url: str = None,
        nearblocks_url: str = None,
        max_concurrent: int = None,
        timeout: float = None,
        max_retries: int = None,
    ):
        self.rpc_url = rpc_url or config.near_rpc_url
        self.nearblocks_url = (nearblocks_url or config.nearblocks_url).rstrip("/")
        self.max_concurrent = max_concurrent or config.max_concurrent_requests
        self.timeout = timeout or config.request_timeout_sec
        self.max_retries = max_retries if max_retries is not None else config.max_retries
        self._session: Optional[aiohttp.ClientSession] = None
        self._semaphore: Optional[asyncio.Semaphore] = None

    async def __aenter__(self):
        await self._ensure_session()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def _ensure_session(self):
        """Create session and semaphore if needed."""
        if self._session is None:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout)
            )
            self._semaphore = asyncio.Semaphore(self.max_concurrent)

    async def close(self):
        """Close the HTTP session."""
        if self._session:
            await self._session.close()
            self._session = None

    async def _request(self, method: str, url: str, account_id: str, **kwargs) -> Any:
        """
        Make an HTTP request and return the decoded JSON body.

        Retries connection errors, timeouts and HTTP 429 with exponential
        backoff.

        Raises:
            NearAPIError: on non-200 status, invalid JSON or exhausted retries
        """
        await self._ensure_session()
        last_error = "no attempts made"
        backoff = 0.0

        for attempt in range(self.max_retries + 1):
            # Back off outside the semaphore so other requests keep flowing
            if backoff:
                await asyncio.sleep(backoff)
                backoff = 0.0

            try:
                async with self._semaphore:
                    start = time.monotonic()
                    async with self._session.request(method, url, **kwargs) as response:
                        duration_ms = int((time.monotonic() - start) * 1000)
                        logger.debug(
                            f"Request completed account={account_id} duration_ms={duration_ms} "
                            f"status={response.status}"
                        )

                        if response.status == 429:
                            last_error = "rate limited (HTTP 429)"
                            if attempt < self.max_retries:
                                backoff = config.rate_limit_backoff_sec * (2 ** attempt)
                                logger.warning(f"Rate limited account={account_id}, backing off {backoff}s")
                            else:
                                logger.warning(f"Rate limited account={account_id}, retries exhausted")
                            continue

                        if response.status != 200:
                            body = await response.text()
                            raise NearAPIError(
                                f"HTTP {response.status}: {body[:200]}", account_id=account_id
                            )

                        try:
                            return await response.json(content_type=None)
                        except ValueError as e:
                            raise NearAPIError(
                                f"Failed to parse response: {e}", account_id=account_id
                            ) from e

            except (aiohttp.ClientError, asyncio.TimeoutError) as e:
                last_error = f"HTTP request failed: {str(e) or type(e).__name__}"
                logger.error(f"Request error account={account_id} (attempt {attempt + 1}): {last_error}")
                if attempt < self.max_retries:
                    await asyncio.sleep(config.rate_limit_backoff_sec)
                continue

        raise NearAPIError(last_error, account_id=account_id)

    # -------------------------------------------------------------------------
    # Public Methods
    # -------------------------------------------------------------------------

    async def fetch_balance(self, account_id: str) -> int:
        """
        Get the current balance of an account in yoctoNEAR.

        Uses finality "final" so only confirmed balances are reported.

        Args:
            account_id: NEAR account ID (e.g. "example.near")

        Returns:
            Balance in yoctoNEAR (1 NEAR = 10^24 yoctoNEAR)

        Raises:
            NearAPIError: on request failure, RPC error or unparseable amount
        """
        logger.debug(f"Fetching balance account={account_id} endpoint={self.rpc_url}")

        payload = {
            "jsonrpc": "2.0",
            "id": "1",
            "method": "query",
            "params": {
                "request_type": "view_account",
                "finality": "final",
                "account_id": account_id,
            },
        }

        response = await self._request("POST", self.rpc_url, account_id, json=payload)
        balance = self._parse_balance(response, account_id)

        logger.debug(f"Successfully fetched balance account={account_id} balance_yocto={balance}")
        return balance

    async def fetch_transactions(self, account_id: str) -> List[Transaction]:
        """
        Get the most recent unique transactions for an account.

        Deduplicates by hash, sorts newest first and caps the result at
        config.transactions_display_limit.

        Raises:
            NearAPIError: on request or parse failure
        """
        limit = config.transactions_fetch_limit
        logger.debug(f"Fetching transactions account={account_id} limit={limit}")

        url = f"{self.nearblocks_url}/account/{account_id}/txns"
        response = await self._request("GET", url, account_id, params={"limit": str(limit)})
        txs = self._parse_transactions(response, account_id)

        logger.info(f"Successfully fetched transactions account={account_id} count={len(txs)}")
        return txs

    # -------------------------------------------------------------------------
    # Private Helpers
    # -------------------------------------------------------------------------

    @staticmethod
    def _parse_balance(response: Any, account_id: str) -> int:
        """Extract the yoctoNEAR amount from a view_account RPC response."""
        if not isinstance(response, dict):
            raise NearAPIError("Failed to parse response: not a JSON object", account_id=account_id)

        error = response.get("error")
        if error:
            logger.error(f"RPC error account={account_id}: {error}")
            raise NearAPIError(f"RPC error: {error}", account_id=account_id)

        result = response.get("result")
        if not isinstance(result, dict):
            logger.error(f"No result in RPC response account={account_id}")
            raise NearAPIError("No result in response", account_id=account_id)

        # RPC-level errors can also come back inside result
        if "error" in result:
            raise NearAPIError(f"RPC error: {result['error']}", account_id=account_id)

        try:
            balance = int(result["amount"])
        except (KeyError, TypeError, ValueError) as e:
            logger.error(f"Failed to parse balance amount account={account_id}: {e}")
            raise NearAPIError(f"Failed to parse amount: {e}", account_id=account_id) from e

        if balance < 0:
            raise NearAPIError(f"Failed to parse amount: negative value {balance}", account_id=account_id)

        return balance

    @staticmethod
    def _parse_transactions(response: Any, account_id: str) -> List[Transaction]:
        """Parse, deduplicate and sort a NearBlocks txns response."""
        if not isinstance(response, dict) or not isinstance(response.get("txns"), list):
            logger.error(f"Failed to parse NearBlocks response account={account_id}")
            raise NearAPIError("Failed to parse response: missing txns", account_id=account_id)

        txs: List[Transaction] = []
        seen_hashes = set()

        for item in response["txns"]:
            try:
                tx = Transaction.from_api(item)
            except (KeyError, TypeError, ValueError, AttributeError) as e:
                logger.debug(f"Skipping malformed transaction account={account_id}: {e}")
                continue

            if tx.hash in seen_hashes:
                continue
            seen_hashes.add(tx.hash)
            txs.append(tx)

        logger.debug(f"Deduplicated transactions account={account_id} unique_count={len(txs)}")

        # Nanosecond timestamps - compare numerically, not lexically
        txs.sort(key=lambda t: _timestamp_key(t.block_timestamp), reverse=True)
        return txs[:config.transactions_display_limit]


def _timestamp_key(value: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0
