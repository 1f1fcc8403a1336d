"""
REST client for the Clash external controller.

This module owns every request clashpick sends once the controller port is
known: the proxies catalog, node selection, and delay measurement. Library
failures are translated into clashpick errors here so callers only see the
clashpick taxonomy.
"""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote

import requests

from clashpick.common.errors import DecodeError, HTTPStatusError, TransportError
from clashpick.common.settings import settings
from clashpick.common.types import Catalog, ProxyOrGroup

logger = logging.getLogger(__name__)

HTTP_OK = 200
HTTP_NO_CONTENT = 204


def pathSegment_encode(name: str) -> str:
    """Percent-encode a proxy or group name for use in a URL path"""
    return quote(name, safe="")


def catalog_build(proxies: dict[str, ProxyOrGroup]) -> Catalog:
    """
    Derive the selectable groups from a proxies mapping.

    Args:
        proxies:
            Every proxy and group, keyed by name.

    Returns:
        Catalog whose selectable groups follow the root grouping's member
        order when it exists, else the mapping's iteration order.
    """
    root: ProxyOrGroup | None = proxies.get(settings.ROOT_GROUP_NAME)
    if root is not None:
        selectable: list[ProxyOrGroup] = [
            proxies[member]
            for member in root.members
            if member in proxies and proxies[member].isGroup()
        ]
    else:
        selectable = [entry for entry in proxies.values() if entry.isGroup()]
    return Catalog(selectable_groups=selectable, by_name=proxies)


class ControllerClient:
    """
    HTTP client bound to one controller base URL.

    Requests bypass environment proxy settings, since the controller is
    normally local and routing it through the proxy it controls would loop.
    """

    def __init__(self, base_url: str, session: requests.Session | None = None) -> None:
        """
        Initialize client.

        Args:
            base_url:
                Controller base URL, e.g. http://127.0.0.1:9090.
            session:
                Optional HTTP session to reuse. A given session stays open
                after close(); one created here is closed with the client.
        """
        self.base_url: str = base_url.rstrip("/")
        self._session_owned: bool = session is None
        if session is None:
            session = requests.Session()
            session.trust_env = False
        self.session: requests.Session = session

    def close(self) -> None:
        """Release the connection pool if this client created it"""
        if self._session_owned:
            self.session.close()

    def __enter__(self) -> "ControllerClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def _request(self, method: str, path: str, timeout: float, **kwargs: Any) -> requests.Response:
        url: str = self.base_url + path
        logger.debug(f"{method} {url}")
        try:
            return self.session.request(method, url, timeout=timeout, **kwargs)
        except requests.RequestException as exc:
            raise TransportError(f"{method} {url} failed: {exc}") from exc

    def catalog_fetch(self) -> Catalog:
        """
        Fetch all proxies and groups.

        Returns:
            Fresh catalog snapshot.

        Raises:
            TransportError:
                Raised when the request fails.
            HTTPStatusError:
                Raised on any status other than 200.
            DecodeError:
                Raised when the body is not a proxies mapping.
        """
        response = self._request("GET", "/proxies", settings.API_TIMEOUT_SEC)
        if response.status_code != HTTP_OK:
            raise HTTPStatusError(response.status_code, "in catalog_fetch, expected 200")

        try:
            body = response.json()
        except ValueError as exc:
            raise DecodeError(f"proxies response is not JSON: {exc}") from exc

        raw = body.get("proxies") if isinstance(body, dict) else None
        if not isinstance(raw, dict):
            raise DecodeError("proxies response has no 'proxies' object")

        proxies: dict[str, ProxyOrGroup] = {}
        for key, payload in raw.items():
            if not isinstance(payload, dict):
                raise DecodeError(f"proxy entry {key!r} is not an object")
            try:
                proxies[key] = ProxyOrGroup.payload_parse(key, payload)
            except TypeError as exc:
                raise DecodeError(str(exc)) from exc

        catalog: Catalog = catalog_build(proxies)
        logger.info(
            f"Catalog fetched: {len(proxies)} entries, "
            f"{len(catalog.selectable_groups)} selectable groups"
        )
        return catalog

    def nodeSelection_apply(self, group_name: str, node_name: str) -> None:
        """
        Make node_name the active member of group_name.

        Raises:
            TransportError:
                Raised when the request fails.
            HTTPStatusError:
                Raised on any status other than 204.
        """
        response = self._request(
            "PUT",
            f"/proxies/{pathSegment_encode(group_name)}",
            settings.API_TIMEOUT_SEC,
            json={"name": node_name},
        )
        if response.status_code != HTTP_NO_CONTENT:
            raise HTTPStatusError(
                response.status_code, "in nodeSelection_apply, return status should be 204"
            )

    def delay_measure(
        self,
        node_name: str,
        test_url: str,
        timeout_ms: int = settings.DELAY_TEST_TIMEOUT_MS,
    ) -> int:
        """
        Ask the controller to measure a node's delay against test_url.

        Args:
            node_name:
                Proxy or group to test.
            test_url:
                URL the controller fetches through the node.
            timeout_ms:
                Controller-side test timeout.

        Returns:
            Delay in milliseconds.

        Raises:
            TransportError:
                Raised when the request fails.
            HTTPStatusError:
                Raised on a non-200 status, carrying the controller's message.
            DecodeError:
                Raised when a 200 response has no readable delay.
        """
        response = self._request(
            "GET",
            f"/proxies/{pathSegment_encode(node_name)}/delay",
            settings.DELAY_REQUEST_TIMEOUT_SEC,
            params={"timeout": str(timeout_ms), "url": test_url},
        )

        body: Any
        try:
            body = response.json()
        except ValueError as exc:
            if response.status_code != HTTP_OK:
                raise HTTPStatusError(response.status_code, "delay test error") from exc
            raise DecodeError(f"delay response is not JSON: {exc}") from exc
        if not isinstance(body, dict):
            body = {}

        if response.status_code != HTTP_OK:
            raise HTTPStatusError(
                response.status_code, "delay test error", str(body.get("message") or "")
            )

        delay = body.get("delay")
        if not isinstance(delay, int) or isinstance(delay, bool):
            raise DecodeError(f"delay response has no integer 'delay': {body!r}")
        return delay
