"""Application settings singleton - single source of truth for constants

This module consolidates the values that describe the Clash external
controller API and the timing policy clashpick applies to it.

Usage:
    from clashpick.common.settings import settings

    response = session.get(url, timeout=settings.PROBE_TIMEOUT_SEC)
"""

from typing import Optional


class Settings:
    """Singleton holding controller API constants and request timeouts"""

    _instance: Optional["Settings"] = None

    def __new__(cls) -> "Settings":
        """Ensure only one Settings instance exists"""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    # =========================================================================
    # Controller API Constants
    # =========================================================================

    PROBE_PORTS: tuple[int, ...] = (9090, 9091, 19090, 19091)
    """Ports tried, in order, when no controller port is configured"""

    HELLO_FIELD: str = "hello"
    HELLO_VALUE: str = "clash"
    """GET / on a controller answers {"hello": "clash"}"""

    ROOT_GROUP_NAME: str = "GLOBAL"
    """Synthetic group whose members list the top-level groups in display order"""

    DELAY_TEST_TIMEOUT_MS: int = 5000
    """timeout query parameter passed to /proxies/{name}/delay"""

    # =========================================================================
    # Request Timeouts
    # =========================================================================

    PROBE_TIMEOUT_SEC: float = 0.3
    """Per-candidate timeout while probing for the controller port"""

    API_TIMEOUT_SEC: float = 5.0
    """Timeout for catalog fetch and node selection"""

    DELAY_REQUEST_TIMEOUT_SEC: float = 120.0
    """Timeout for delay requests

    The controller blocks until its own test against the remote URL finishes,
    so this must stay well above DELAY_TEST_TIMEOUT_MS.
    """

    # =========================================================================
    # Defaults
    # =========================================================================

    DEFAULT_ADDR: str = "127.0.0.1"
    DEFAULT_SCHEME: str = "http"
    DEFAULT_TEST_URL: str = "http://connectivitycheck.gstatic.com/generate_204"
    SUPPORTED_SCHEMES: tuple[str, ...] = ("http", "https")

    LOG_LEVELS: tuple[str, ...] = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
    DEFAULT_LOG_LEVEL: str = "WARNING"
    DEFAULT_LOG_FORMAT: str = "%(asctime)s %(levelname)s %(name)s: %(message)s"


# Global singleton instance
settings = Settings()
"""Global settings singleton instance

Import this anywhere in the application:
    from clashpick.common.settings import settings
"""
