"""httpx transports that apply chaos decisions to outgoing requests.

Mount them explicitly on a client::

    interceptor = ChaosInterceptor.from_environ()
    client = httpx.Client(transport=ChaosTransport(interceptor))

Failures with an HTTP status are returned as synthesized responses so client
code sees the same thing a real failing server would produce.  Code ``0``
failures raise :class:`httpx.ConnectError` and timeouts raise
:class:`httpx.ReadTimeout`; neither is forwarded.  Closing a transport ends
the timeout holds of its own in-flight requests and no others.
"""

from __future__ import annotations

import asyncio
import time

import httpx

from laggy.core import ChaosTimeoutError
from laggy.interceptor import AsyncHoldGroup, ChaosInterceptor, HoldGroup
from laggy.models import Decision, Delay, Fail, Timeout


def _read_timeout(request: httpx.Request) -> float | None:
    timeout = request.extensions.get("timeout") or {}
    return timeout.get("read")


def _failure_response(request: httpx.Request, decision: Fail) -> httpx.Response:
    return httpx.Response(
        decision.status_code,
        headers={"X-Laggy-Chaos": "fail"},
        text=decision.message,
        request=request,
    )


class ChaosTransport(httpx.BaseTransport):
    """Wrap a sync transport and inject latency, failures and timeouts."""

    def __init__(
        self,
        interceptor: ChaosInterceptor,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.interceptor = interceptor
        self._transport = transport if transport is not None else httpx.HTTPTransport()
        self._holds = HoldGroup()

    def handle_request(self, request: httpx.Request) -> httpx.Response:
        decision: Decision = self.interceptor.evaluate(str(request.url), request.method)

        if isinstance(decision, Timeout):
            try:
                self.interceptor.apply(
                    decision, timeout_s=_read_timeout(request), holds=self._holds
                )
            except ChaosTimeoutError as exc:
                raise httpx.ReadTimeout(str(exc), request=request) from exc

        if isinstance(decision, Fail):
            if decision.delay_ms > 0:
                time.sleep(decision.delay_ms / 1000.0)
            if decision.is_network_error:
                raise httpx.ConnectError(decision.message, request=request)
            return _failure_response(request, decision)

        if isinstance(decision, Delay) and decision.delay_ms > 0:
            time.sleep(decision.delay_ms / 1000.0)
        return self._transport.handle_request(request)

    def close(self) -> None:
        # Only this transport's holds; the interceptor may serve other clients.
        self._holds.release()
        self._transport.close()


class AsyncChaosTransport(httpx.AsyncBaseTransport):
    """Asyncio counterpart of :class:`ChaosTransport`."""

    def __init__(
        self,
        interceptor: ChaosInterceptor,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.interceptor = interceptor
        self._transport = (
            transport if transport is not None else httpx.AsyncHTTPTransport()
        )
        self._holds = AsyncHoldGroup()

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        decision: Decision = self.interceptor.evaluate(str(request.url), request.method)

        if isinstance(decision, Timeout):
            try:
                await self.interceptor.apply_async(
                    decision, timeout_s=_read_timeout(request), holds=self._holds
                )
            except ChaosTimeoutError as exc:
                raise httpx.ReadTimeout(str(exc), request=request) from exc

        if isinstance(decision, Fail):
            if decision.delay_ms > 0:
                await asyncio.sleep(decision.delay_ms / 1000.0)
            if decision.is_network_error:
                raise httpx.ConnectError(decision.message, request=request)
            return _failure_response(request, decision)

        if isinstance(decision, Delay) and decision.delay_ms > 0:
            await asyncio.sleep(decision.delay_ms / 1000.0)
        return await self._transport.handle_async_request(request)

    async def aclose(self) -> None:
        self._holds.release()
        await self._transport.aclose()


__all__ = ["AsyncChaosTransport", "ChaosTransport"]
