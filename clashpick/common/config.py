"""Configuration file loading and run configuration resolution

Values come from, in decreasing priority: command-line flags, CLASH_*
environment variables, the YAML config file, and built-in defaults.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence

import yaml

from clashpick.common.errors import ConfigError
from clashpick.common.settings import settings
from clashpick.common.types import FeatureMode, RunConfig

ENV_PORT = "CLASH_PORT"
ENV_ADDR = "CLASH_ADDR"
ENV_SCHEME = "CLASH_SCHEME"
ENV_GROUPS = "CLASH_GROUPS"
ENV_TEST_URL = "CLASH_TEST_URL"


@dataclass
class ControllerConfig:
    """Controller settings from the config file; None means unset"""
    port: Optional[int] = None
    addr: Optional[str] = None
    scheme: Optional[str] = None
    test_url: Optional[str] = None
    groups: List[str] = field(default_factory=list)


@dataclass
class LoggingConfig:
    """Logging configuration settings"""
    level: str = settings.DEFAULT_LOG_LEVEL
    file: Optional[str] = None
    format: str = settings.DEFAULT_LOG_FORMAT


@dataclass
class Config:
    """Complete config file contents"""
    controller: ControllerConfig = field(default_factory=ControllerConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


class ConfigLoader:
    """Loads and parses configuration from YAML files"""

    DEFAULT_CONFIG_PATHS = [
        "clashpick.yml",
        "~/.config/clashpick/config.yml",
        "/etc/clashpick/config.yml",
    ]

    @staticmethod
    def configFile_find() -> Optional[Path]:
        """
        Find configuration file in standard locations

        Returns:
            Path to config file, or None if not found
        """
        for config_path in ConfigLoader.DEFAULT_CONFIG_PATHS:
            path = Path(config_path).expanduser().resolve()
            if path.exists() and path.is_file():
                return path
        return None

    @staticmethod
    def yaml_load(file_path: Path) -> Dict[str, Any]:
        """
        Load YAML configuration file

        Args:
            file_path: Path to YAML file

        Returns:
            Parsed configuration dictionary; an empty file yields {}

        Raises:
            FileNotFoundError: If file does not exist
            yaml.YAMLError: If file is not valid YAML
            ConfigError: If the document is not a mapping
        """
        with open(file_path, "r") as f:
            data = yaml.safe_load(f)

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigError(f"Config file {file_path} must contain a YAML dictionary")

        return data

    @staticmethod
    def config_parse(data: Dict[str, Any]) -> Config:
        """
        Parse configuration dictionary into Config object

        Both sections are optional.

        Args:
            data: Raw configuration dictionary

        Returns:
            Parsed Config object

        Raises:
            ConfigError: If a section has the wrong shape
        """
        controller_data = data.get("controller") or {}
        if not isinstance(controller_data, dict):
            raise ConfigError("'controller' section must be a mapping")
        groups = controller_data.get("groups") or []
        if isinstance(groups, str):
            groups = groupList_split(groups)
        if not isinstance(groups, list):
            raise ConfigError("'controller.groups' must be a list")
        port = controller_data.get("port")
        controller = ControllerConfig(
            port=port_validate(port) if port is not None else None,
            addr=controller_data.get("addr"),
            scheme=controller_data.get("scheme"),
            test_url=controller_data.get("test_url"),
            groups=[str(g).strip() for g in groups if str(g).strip()],
        )

        logging_data = data.get("logging") or {}
        if not isinstance(logging_data, dict):
            raise ConfigError("'logging' section must be a mapping")
        level = str(logging_data.get("level", settings.DEFAULT_LOG_LEVEL)).upper()
        if level not in settings.LOG_LEVELS:
            raise ConfigError(f"Unknown log level: {level}")
        logging = LoggingConfig(
            level=level,
            file=logging_data.get("file"),
            format=logging_data.get("format", settings.DEFAULT_LOG_FORMAT),
        )

        return Config(controller=controller, logging=logging)

    @staticmethod
    def config_load(file_path: Optional[Path] = None) -> Config:
        """
        Load configuration from file

        Args:
            file_path: Optional path to config file. If None, searches standard
                locations and falls back to an all-default Config.

        Returns:
            Parsed Config object

        Raises:
            ConfigError: If an explicit file is missing or any file is invalid
        """
        if file_path is None:
            file_path = ConfigLoader.configFile_find()
            if file_path is None:
                return Config()
        elif not file_path.is_file():
            raise ConfigError(f"Config file not found: {file_path}")

        try:
            data = ConfigLoader.yaml_load(file_path)
        except yaml.YAMLError as e:
            raise ConfigError(f"Config file {file_path} is not valid YAML: {e}") from e
        return ConfigLoader.config_parse(data)


def port_validate(value: Any) -> int:
    """
    Validate a TCP port given as int or string

    Raises:
        ConfigError: If the value is not an integer in 1..65535
    """
    try:
        port = int(value)
    except (TypeError, ValueError):
        raise ConfigError(f"Bad port: {value}") from None
    if isinstance(value, bool) or port <= 0 or port > 65535:
        raise ConfigError(f"Bad port: {value}")
    return port


def groupList_split(raw: str) -> List[str]:
    """Split a comma separated group list, dropping blank entries"""
    return [part.strip() for part in raw.split(",") if part.strip()]


def featureMode_resolve(select: bool, delay_test: bool) -> FeatureMode:
    """
    Pick the action to run; select is the default

    Raises:
        ConfigError: If both actions were requested
    """
    if select and delay_test:
        raise ConfigError("Can't select more than one feature")
    if delay_test:
        return FeatureMode.DELAY_TEST
    return FeatureMode.SELECT


def runConfig_resolve(
    file_config: Config,
    env: Mapping[str, str],
    port: Optional[int] = None,
    addr: Optional[str] = None,
    scheme: Optional[str] = None,
    test_url: Optional[str] = None,
    groups: Sequence[str] = (),
    feature: FeatureMode = FeatureMode.SELECT,
) -> RunConfig:
    """
    Merge flags, environment and config file into a RunConfig

    Args:
        file_config: Parsed config file (defaults when no file exists)
        env: Environment mapping, normally os.environ
        port, addr, scheme, test_url, groups: Flag values; None or empty means unset
        feature: Resolved action

    Returns:
        Immutable run configuration

    Raises:
        ConfigError: If the port or scheme is invalid
    """
    controller = file_config.controller

    resolved_port: Optional[int]
    if port is not None:
        resolved_port = port_validate(port)
    elif env.get(ENV_PORT):
        resolved_port = port_validate(env[ENV_PORT])
    else:
        resolved_port = controller.port

    resolved_addr = addr or env.get(ENV_ADDR) or controller.addr or settings.DEFAULT_ADDR

    resolved_scheme = (
        scheme or env.get(ENV_SCHEME) or controller.scheme or settings.DEFAULT_SCHEME
    ).lower()
    if resolved_scheme not in settings.SUPPORTED_SCHEMES:
        raise ConfigError(f"Unsupported scheme: {resolved_scheme}")

    resolved_test_url = (
        test_url or env.get(ENV_TEST_URL) or controller.test_url or settings.DEFAULT_TEST_URL
    )

    resolved_groups: List[str] = list(groups)
    if not resolved_groups:
        resolved_groups = groupList_split(env.get(ENV_GROUPS, ""))
    if not resolved_groups:
        resolved_groups = list(controller.groups)

    return RunConfig(
        port=resolved_port,
        addr=resolved_addr,
        scheme=resolved_scheme,
        groups=tuple(resolved_groups),
        test_url=resolved_test_url,
        feature=feature,
    )


def runConfigFromEnviron_resolve(file_config: Config, **flags: Any) -> RunConfig:
    """runConfig_resolve against the process environment"""
    return runConfig_resolve(file_config, os.environ, **flags)
