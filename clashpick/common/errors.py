"""Error taxonomy for clashpick

Every failure the command line can report derives from ClashPickError, so
cli.main() can turn any of them into a diagnostic and a non-zero exit.
"""

from __future__ import annotations


class ClashPickError(Exception):
    """Base class for all clashpick failures"""


class ConfigError(ClashPickError):
    """Invalid flags, environment variables or config file"""


class PortNotFoundError(ClashPickError):
    """No candidate port answered as a Clash controller"""


class TransportError(ClashPickError):
    """Request to the controller failed before a response arrived"""


class DecodeError(ClashPickError):
    """Controller response body did not have the expected shape"""


class HTTPStatusError(ClashPickError):
    """Controller answered with an unexpected HTTP status"""

    def __init__(self, status_code: int, context: str, message: str = "") -> None:
        self.status_code: int = status_code
        self.message: str = message
        text = f"{context}, got HTTP status code {status_code}"
        if message:
            text += f', message "{message}"'
        super().__init__(text)


class NoMatchingGroupsError(ClashPickError):
    """None of the supplied group tokens matched a controller group"""


class NoSelectionError(ClashPickError):
    """Input ended before a required selection was made"""
