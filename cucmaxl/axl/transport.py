import asyncio
from collections import namedtuple
import logging

import httpx

from cucmaxl.axl.configs import SOAP_ACTION_PREFIX, ClientConfig
from cucmaxl.axl.exceptions import AXLConnectionFailure, AXLTimeout

log = logging.getLogger(__name__)

RawResponse = namedtuple("RawResponse", ("status_code", "body"))


def soap_headers(config: ClientConfig, operation: str) -> dict:
    """Headers sent with every AXL request for `operation`."""
    return {
        "SOAPAction": f"{SOAP_ACTION_PREFIX} ver={config.api_version} {operation}",
        "Authorization": f"Basic {config.auth_token}",
        "Content-Type": "text/xml; charset=utf-8",
    }


class AXLTransport:
    """One httpx client bound to a single AXL endpoint.

    No retries, and redirects are not followed. httpx applies the timeout to
    each phase (connect, read, write, pool) separately, so every request is
    also bounded as a whole by `config.timeout`.
    """

    def __init__(
        self,
        config: ClientConfig,
        *,
        transport: httpx.AsyncBaseTransport = None,
    ) -> None:
        self.config = config
        self.client = httpx.AsyncClient(
            base_url=config.base_url,
            timeout=config.timeout,
            verify=config.verify,
            follow_redirects=False,
            transport=transport,
        )

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_value, traceback):
        await self.aclose()

    async def aclose(self) -> None:
        await self.client.aclose()

    async def send(self, path: str, body: bytes, headers: dict) -> RawResponse:
        """POSTs `body` to `path` (relative to the AXL base URL).

        :raises AXLTimeout: when no response arrives within the configured timeout
        :raises AXLConnectionFailure: for refused connections, DNS or TLS failures
        """
        return await self._request("POST", path, content=body, headers=headers)

    async def get(self, url: str, headers: dict = None) -> RawResponse:
        """Authenticated GET, used for connection checks outside of SOAP calls."""
        if headers is None:
            headers = {"Authorization": f"Basic {self.config.auth_token}"}
        return await self._request("GET", url, headers=headers)

    async def _request(self, method: str, url: str, **kwargs) -> RawResponse:
        target = str(self.client.base_url.join(url))
        try:
            recv = await asyncio.wait_for(
                self.client.request(method, url, **kwargs), self.config.timeout
            )
        except (httpx.TimeoutException, asyncio.TimeoutError) as err:
            log.error(f"{method} {target} timed out after {self.config.timeout} sec")
            raise AXLTimeout(target, self.config.timeout, err) from err
        except httpx.TransportError as err:
            log.error(f"{method} {target} failed: {err!r}")
            raise AXLConnectionFailure(target, err) from err

        log.debug(f"{method} {target} -> HTTP {recv.status_code}")
        return RawResponse(recv.status_code, recv.text)
