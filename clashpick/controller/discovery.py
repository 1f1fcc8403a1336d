"""
Controller port discovery.

When no port is configured, the well-known controller ports are probed one
after another. The probe order is printed as progress, so candidates are never
tried in parallel.
"""

from __future__ import annotations

import logging
from typing import Optional

import requests

from clashpick.common.errors import PortNotFoundError
from clashpick.common.settings import settings

__all__ = ["PROBE_PORTS", "port_decide", "port_probe", "candidatePorts_scan"]

logger = logging.getLogger(__name__)

PROBE_PORTS: tuple[int, ...] = settings.PROBE_PORTS


def port_probe(session: requests.Session, scheme: str, addr: str, port: int) -> str | None:
    """
    Check whether a Clash controller answers on one port.

    Args:
        session:
            HTTP session used for the probe.
        scheme:
            Controller scheme.
        addr:
            Controller address.
        port:
            Candidate port.

    Returns:
        None when the port belongs to a controller, otherwise a failure
        description suitable for the progress line.
    """
    url: str = f"{scheme}://{addr}:{port}/"
    try:
        response = session.get(url, timeout=settings.PROBE_TIMEOUT_SEC)
    except requests.RequestException as exc:
        return f"FAIL(Response): {exc}"

    try:
        body = response.json()
    except ValueError as exc:
        return f"FAIL(Decoding): {exc}"

    if not isinstance(body, dict) or body.get(settings.HELLO_FIELD) != settings.HELLO_VALUE:
        return "FAIL: not a Clash controller instance"
    return None


def port_decide(
    explicit_port: Optional[int],
    addr: str,
    scheme: str,
    session: requests.Session | None = None,
) -> int:
    """
    Return the controller port, probing candidates when none is given.

    Args:
        explicit_port:
            Configured port. Returned as-is without contacting the controller.
        addr:
            Controller address.
        scheme:
            Controller scheme.
        session:
            Optional HTTP session; a direct (environment-proxy-free) session is
            created when omitted.

    Returns:
        Port the controller listens on.

    Raises:
        PortNotFoundError:
            Raised when no candidate port answers as a controller.
    """
    if explicit_port is not None:
        return explicit_port

    if session is not None:
        return candidatePorts_scan(session, addr, scheme)

    with requests.Session() as direct_session:
        direct_session.trust_env = False
        return candidatePorts_scan(direct_session, addr, scheme)


def candidatePorts_scan(session: requests.Session, addr: str, scheme: str) -> int:
    """
    Probe the candidate ports in order and return the first controller.

    Raises:
        PortNotFoundError:
            Raised when no candidate port answers as a controller.
    """
    for port in PROBE_PORTS:
        print(f"Trying port {port}...", end="", flush=True)
        failure: str | None = port_probe(session, scheme, addr, port)
        if failure is not None:
            print(failure)
            logger.debug(f"Port {port} rejected: {failure}")
            continue

        print("OK")
        print()
        logger.info(f"Controller found at {scheme}://{addr}:{port}")
        return port

    raise PortNotFoundError("can't find a port that a Clash controller instance runs on")
