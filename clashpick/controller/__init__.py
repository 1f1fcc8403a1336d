"""Clash external controller access: port discovery and REST calls."""

from clashpick.controller.client import ControllerClient
from clashpick.controller.discovery import PROBE_PORTS, port_decide

__all__ = ["ControllerClient", "PROBE_PORTS", "port_decide"]
