"""Endpoint prober: bounded-time JSON-RPC liveness check for one RPC host."""

import asyncio
import logging

import httpx

from rpcval.config import ValidatorConfig
from rpcval.models import ValidationOutcome

logger = logging.getLogger(__name__)

PROBE_METHOD = "getTokenAccountBalance"


class RpcError(Exception):
    """Raised when an endpoint answers with a JSON-RPC error or garbage."""


class RpcProber:
    """Probe RPC endpoints by requesting a known token account balance.

    One ``httpx.AsyncClient`` is shared by every probe of a run; use the
    prober as an async context manager so the connection pool is closed::

        async with RpcProber(config) as prober:
            ok = await prober.probe("1.2.3.4:8899")

    Args:
        config: Loaded application configuration.
        transport: Optional ``httpx`` transport, e.g. ``httpx.MockTransport``
            in tests.
    """

    def __init__(
        self,
        config: ValidatorConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._account = config.test_token_account
        self._commitment = config.commitment
        self._timeout = config.connection_timeout_ms / 1000
        self._client = httpx.AsyncClient(
            timeout=self._timeout,
            limits=httpx.Limits(max_connections=config.max_concurrent_tests),
            transport=transport,
        )

    async def __aenter__(self) -> "RpcProber":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def probe(self, address: str) -> bool:
        """Return ``True`` if *address* answered the probe in time.

        Never raises; every failure is logged and reported as ``False``.
        """
        outcome = await self.probe_outcome(address)
        return outcome.ok

    async def probe_outcome(self, address: str) -> ValidationOutcome:
        """Probe *address* and return the verdict with its failure reason.

        The request races a timer of ``connection_timeout_ms``; when the
        timer wins, the request is abandoned and the probe fails.
        """
        try:
            await asyncio.wait_for(
                self._get_token_account_balance(address), timeout=self._timeout
            )
        except TimeoutError:
            return self._failed(address, "Connection timed out")
        except (httpx.HTTPError, RpcError, ValueError) as exc:
            return self._failed(address, str(exc) or type(exc).__name__)
        except Exception as exc:  # noqa: BLE001 - probe must never raise
            return self._failed(address, f"{type(exc).__name__}: {exc}")

        logger.info("Successful connection to %s", address)
        return ValidationOutcome(address=address, ok=True)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _request_body(self) -> dict:
        return {
            "jsonrpc": "2.0",
            "id": 1,
            "method": PROBE_METHOD,
            "params": [self._account, {"commitment": self._commitment}],
        }

    async def _get_token_account_balance(self, address: str) -> object:
        """Issue the JSON-RPC call and return its ``result`` member.

        Raises:
            httpx.HTTPError: On transport failures and non-2xx responses.
            ValueError: If the body is not JSON.
            RpcError: If the body is a JSON-RPC error or lacks a result.
        """
        response = await self._client.post(
            f"http://{address}", json=self._request_body()
        )
        response.raise_for_status()
        body = response.json()

        if not isinstance(body, dict):
            raise RpcError(f"Malformed JSON-RPC response: {type(body).__name__}")
        if "error" in body:
            error = body["error"]
            message = error.get("message") if isinstance(error, dict) else error
            raise RpcError(f"JSON-RPC error: {message}")
        if "result" not in body:
            raise RpcError("Malformed JSON-RPC response: missing result")
        return body["result"]

    @staticmethod
    def _failed(address: str, reason: str) -> ValidationOutcome:
        logger.info("Failed to connect to %s: %s", address, reason)
        return ValidationOutcome(address=address, ok=False, error=reason)
