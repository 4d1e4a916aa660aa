import asyncio
import logging
from typing import Callable, Optional

import httpx

from services.errors import TransportFailure

logger = logging.getLogger(__name__)

SendFn = Callable[[dict, Callable[[], None], Callable[[object], None]], None]


class Transport:
    """Carries one discrete message to the device.

    ``send_message`` returns once the device acknowledged the message and raises
    :class:`TransportFailure` when the send failed.
    """

    async def send_message(self, fields: dict) -> None:
        raise NotImplementedError


class CallbackTransport(Transport):
    """Adapts a ``send(fields, on_success, on_failure)`` primitive to ``await``."""

    def __init__(self, send: SendFn):
        self._send = send

    async def send_message(self, fields: dict) -> None:
        loop = asyncio.get_running_loop()
        future = loop.create_future()

        def on_success():
            loop.call_soon_threadsafe(_resolve, future, None)

        def on_failure(error):
            loop.call_soon_threadsafe(_resolve, future, TransportFailure(error))

        self._send(fields, on_success, on_failure)
        await future


def _resolve(future: asyncio.Future, exc: Optional[BaseException]):
    # only the first callback counts
    if future.done():
        return
    if exc is None:
        future.set_result(None)
    else:
        future.set_exception(exc)


class HttpTransport(Transport):
    """Posts each message as JSON to the device bridge; any 2xx is an acknowledgment."""

    def __init__(self, url: str, client: httpx.AsyncClient, timeout: float = 10.0):
        self.url = url
        self.client = client
        self.timeout = timeout

    async def send_message(self, fields: dict) -> None:
        try:
            response = await self.client.post(self.url, json=fields, timeout=self.timeout)
        except httpx.HTTPError as e:
            raise TransportFailure(e) from e
        if not response.is_success:
            raise TransportFailure(f"Device bridge answered {response.status_code}")
