import asyncio
import random
import time
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Union

import aiohttp

from utils.exceptions import (
    CallRevertedError,
    GasEstimationError,
    RetriableValueError,
    RpcGatewayError,
    TraceUnavailableError,
)
from utils.formatter_utils import hex_to_dec
from utils.logger_utils import get_logger
from utils.rpc_utils import rpc_response_to_result

logger = get_logger("Rpc Gateway")

TRACE_CONFIG = {"tracer": "callTracer", "tracerConfig": {"onlyTopCall": False, "withLog": True}}


class RpcGateway(ABC):
    """The three node primitives the simulation engine relies on."""

    @abstractmethod
    async def call(self, tx: Dict[str, Any], block: Union[str, int] = "latest") -> str:
        """eth_call; raises CallRevertedError when execution reverts."""

    @abstractmethod
    async def estimate_gas(self, tx: Dict[str, Any]) -> int:
        """eth_estimateGas; raises GasEstimationError when the call would revert."""

    @abstractmethod
    async def trace_call(self, tx: Dict[str, Any], block: Union[str, int] = "latest") -> Dict[str, Any]:
        """debug_traceCall frame with gasUsed, calls and logs; raises TraceUnavailableError."""

    async def close(self) -> None:
        pass


class JsonRpcGateway(RpcGateway):
    """
    JSON-RPC over HTTP with failover between URLs.
    Uses a persistent ClientSession for connection pooling, adaptive rate
    limiting and exponential backoff for 429s.
    """

    def __init__(
        self,
        rpc_url: Union[str, List[str]],
        max_retries: int = 3,
        timeout: int = 30,
        rpc_min_interval: float = 0.15,
    ):
        if isinstance(rpc_url, str):
            self.rpc_urls = [rpc_url]
        else:
            self.rpc_urls = list(rpc_url)

        if not self.rpc_urls:
            raise ValueError("At least one RPC URL must be provided.")

        self.id_counter = 0
        self.max_retries = max_retries
        # Total timeout for the request (connect + read)
        self.timeout = aiohttp.ClientTimeout(total=timeout)

        self._session: Optional[aiohttp.ClientSession] = None

        # Global Rate Limiter
        self._last_request_time = 0.0
        self._min_interval = rpc_min_interval

    async def __aenter__(self) -> "JsonRpcGateway":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def _get_session(self) -> aiohttp.ClientSession:
        """Lazy loads or returns the existing session."""
        if self._session is None or self._session.closed:
            connector = aiohttp.TCPConnector(limit=100, force_close=False)
            self._session = aiohttp.ClientSession(connector=connector, timeout=self.timeout)
        return self._session

    async def close(self) -> None:
        """Closes the underlying session."""
        if self._session and not self._session.closed:
            await self._session.close()

    def _generate_id(self) -> int:
        self.id_counter += 1
        return self.id_counter

    async def _enforce_rate_limit(self) -> None:
        """Ensures a minimum interval between requests to avoid bursting."""
        elapsed = time.monotonic() - self._last_request_time
        if elapsed < self._min_interval:
            await asyncio.sleep(self._min_interval - elapsed)
        self._last_request_time = time.monotonic()

    async def _handle_429_backoff(self, url: str, attempt: int, method_name: str) -> None:
        """
        Adaptive handling for 429 Too Many Requests: slows every later request
        down by 50% (capped at 2s) and sleeps with exponential backoff + jitter.
        """
        previous_interval = self._min_interval
        self._min_interval = min(max(self._min_interval, 0.05) * 1.5, 2.0)

        if self._min_interval > previous_interval:
            logger.warning(
                f"RPC 429 Rate Limit at {url}. Increasing per-request delay from "
                f"{previous_interval:.2f}s to {self._min_interval:.2f}s"
            )

        backoff_time = (2 ** (attempt - 1)) + random.uniform(0, 1)
        logger.warning(f"RPC 429 at {url} for {method_name}. Backing off for {backoff_time:.2f}s...")
        await asyncio.sleep(backoff_time)

    async def _send(self, method: str, params: List[Any]) -> Any:
        """
        Sends one JSON-RPC request, trying every URL per attempt.

        Reverts and non-retriable JSON-RPC errors are raised at once; network
        errors, 429s, unreadable bodies and transient node errors move on to
        the next URL.
        """
        payload = {"jsonrpc": "2.0", "method": method, "params": params, "id": self._generate_id()}
        session = await self._get_session()

        for attempt in range(1, self.max_retries + 1):
            for url in self.rpc_urls:
                try:
                    await self._enforce_rate_limit()
                    async with session.post(url, json=payload) as response:
                        if response.status == 200:
                            data = await response.json(content_type=None)
                            return rpc_response_to_result(data)
                        elif response.status == 429:
                            await self._handle_429_backoff(url, attempt, method)
                        else:
                            logger.error(f"RPC HTTP Error {response.status} ({method}) at {url}. Trying next provider...")
                except RetriableValueError as e:
                    logger.warning(f"Retriable RPC error in {method} at {url}: {e}")
                except ValueError as e:
                    logger.warning(f"Malformed JSON-RPC response for {method} at {url}: {e}")
                except (aiohttp.ClientError, asyncio.TimeoutError) as e:
                    logger.warning(f"Network error in {method} at {url}: {e}")

            if attempt < self.max_retries:
                wait_time = (2**attempt) + random.uniform(0, 1)
                logger.warning(f"All providers failed for {method} (Attempt {attempt}). Retrying in {wait_time:.2f}s...")
                await asyncio.sleep(wait_time)

        raise RpcGatewayError(
            f"{method} failed on all providers after {self.max_retries} attempts", {"urls": self.rpc_urls}
        )

    async def call(self, tx: Dict[str, Any], block: Union[str, int] = "latest") -> str:
        logger.debug(f"eth_call to {tx.get('to')} at block {block}")
        result = await self._send("eth_call", [tx, block])
        return result if isinstance(result, str) else "0x"

    async def estimate_gas(self, tx: Dict[str, Any]) -> int:
        try:
            result = await self._send("eth_estimateGas", [tx])
        except CallRevertedError as e:
            raise GasEstimationError(f"Gas estimation reverted: {e.full_text()}", {"data": e.data}) from e
        except RpcGatewayError as e:
            raise GasEstimationError(f"Gas estimation failed: {e.message}", e.details) from e

        gas = hex_to_dec(result)
        if gas is None:
            raise GasEstimationError(f"Unexpected eth_estimateGas result: {result!r}")
        return gas

    async def trace_call(self, tx: Dict[str, Any], block: Union[str, int] = "latest") -> Dict[str, Any]:
        # Node implementations disagree on the tracer argument, try each form in turn
        request_formats = [
            [tx, block, TRACE_CONFIG],
            [tx, block, "callTracer"],
            [tx, block, {"tracer": "callTracer"}],
        ]
        last_error: Optional[RpcGatewayError] = None
        for params in request_formats:
            try:
                result = await self._send("debug_traceCall", params)
            except RpcGatewayError as e:
                logger.debug(f"debug_traceCall rejected {params[2]!r}: {e.message}")
                last_error = e
                continue
            if isinstance(result, dict):
                return result
            logger.debug(f"debug_traceCall returned {type(result).__name__}, trying next format")

        message = last_error.message if last_error else "no usable trace returned"
        raise TraceUnavailableError(f"debug_traceCall unavailable: {message}")
