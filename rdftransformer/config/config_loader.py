"""
RDF Transformer Configuration Loader

This module loads and validates transformer configuration from YAML files,
applies environment variable overrides, and merges per-invocation stage
parameters over the configured defaults.
"""

import os
import yaml
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Any, Optional, Mapping
import logging

logger = logging.getLogger(__name__)

DEFAULT_SERVER_URL = "http://localhost:9999/sesame/"

# Stage parameter names
URL_PARAM = "url"
REPOSITORY_ID_PARAM = "repository"
BASE_URI_PARAM = "base-uri"
BASE_URI_PARAM_ALIAS = "base_uri"
CONTEXTS_PARAM = "contexts"
ACTION_PARAM = "action"


class ConfigurationError(Exception):
    """Raised when there are configuration loading or validation errors."""
    pass


class TransformerConfig:
    """
    RDF Transformer configuration loader and manager.

    Loads configuration from YAML files and provides access to the server,
    transform and app sections with default values.
    """

    def __init__(self, config_path: Optional[str] = None):
        """
        Initialize the configuration loader.

        Args:
            config_path: Path to configuration file. If None, uses default locations or built-in defaults.
        """
        self.config_data: Dict[str, Any] = {}
        self.config_path: Optional[str] = None

        if config_path is not None:
            self.load_config(config_path)
        else:
            self._load_default_config()

    @classmethod
    def from_dict(cls, config_data: Dict[str, Any]) -> "TransformerConfig":
        """
        Build a configuration from an in-memory dictionary.

        Args:
            config_data: Configuration sections

        Returns:
            TransformerConfig holding the given sections
        """
        config = cls.__new__(cls)
        config.config_data = dict(config_data)
        config.config_path = "<programmatically created>"
        return config

    def load_config(self, config_path: str) -> None:
        """
        Load configuration from a specific file path.

        Args:
            config_path: Path to the YAML configuration file

        Raises:
            ConfigurationError: If the file cannot be loaded or parsed
        """
        config_file = Path(config_path)

        if not config_file.exists():
            raise ConfigurationError(f"Configuration file not found: {config_path}")

        try:
            with open(config_file, 'r', encoding='utf-8') as f:
                self.config_data = yaml.safe_load(f) or {}

            self.config_path = str(config_file.absolute())
            logger.info(f"Loaded configuration from: {self.config_path}")

        except yaml.YAMLError as e:
            raise ConfigurationError(f"Error parsing YAML configuration: {e}")
        except OSError as e:
            raise ConfigurationError(f"Error loading configuration file: {e}")

    def _load_default_config(self) -> None:
        """
        Load default configuration by searching standard locations or using built-in defaults.
        """
        default_paths = [
            "rdftransformer-config.yaml",
            "rdftransformer_config/rdftransformer-config.yaml",
            os.path.expanduser("~/.rdftransformer/rdftransformer-config.yaml"),
            "/etc/rdftransformer/rdftransformer-config.yaml"
        ]

        for path in default_paths:
            if os.path.exists(path):
                try:
                    self.load_config(path)
                    return
                except ConfigurationError as e:
                    logger.warning(f"Skipping unreadable config {path}: {e}")
                    continue

        self.config_data = self._get_default_config()
        self.config_path = "<built-in defaults>"
        logger.info("Using built-in default configuration")

    def _get_default_config(self) -> Dict[str, Any]:
        """
        Get the default configuration values.

        Returns:
            Dictionary containing default configuration values
        """
        return {
            'server': {
                'url': DEFAULT_SERVER_URL,
                'timeout': 30,
                'use_mock_repository': False
            },
            'transform': {
                'require_clear_confirmation': False
            },
            'app': {
                'log_level': 'INFO'
            }
        }

    def get_server_config(self) -> Dict[str, Any]:
        return self.config_data.get('server') or {}

    def get_transform_config(self) -> Dict[str, Any]:
        return self.config_data.get('transform') or {}

    def get_app_config(self) -> Dict[str, Any]:
        return self.config_data.get('app') or {}

    def get_server_url(self) -> str:
        """
        Get the triple-store server URL.

        Overridden by RDF_TRANSFORMER_SERVER_URL.

        Returns:
            Server URL string
        """
        return os.getenv('RDF_TRANSFORMER_SERVER_URL',
                         self.get_server_config().get('url', DEFAULT_SERVER_URL))

    def get_repository_id(self) -> Optional[str]:
        """
        Get the configured repository identifier, if any.

        Overridden by RDF_TRANSFORMER_REPOSITORY.
        """
        return os.getenv('RDF_TRANSFORMER_REPOSITORY', self.get_server_config().get('repository'))

    def get_credentials(self) -> tuple[Optional[str], Optional[str]]:
        """
        Get username and password for basic authentication.

        Overridden by RDF_TRANSFORMER_USERNAME and RDF_TRANSFORMER_PASSWORD.

        Returns:
            Tuple of (username, password); either may be None
        """
        server_config = self.get_server_config()
        username = os.getenv('RDF_TRANSFORMER_USERNAME', server_config.get('username'))
        password = os.getenv('RDF_TRANSFORMER_PASSWORD', server_config.get('password'))
        return username, password

    def get_timeout(self) -> int:
        """
        Get the request timeout in seconds.

        Overridden by RDF_TRANSFORMER_TIMEOUT.
        """
        timeout = os.getenv('RDF_TRANSFORMER_TIMEOUT', self.get_server_config().get('timeout', 30))
        try:
            return int(timeout)
        except (ValueError, TypeError):
            raise ConfigurationError(f"Request timeout must be an integer: {timeout!r}")

    def use_mock_repository(self) -> bool:
        """Whether to use the in-memory repository instead of the HTTP server."""
        return bool(self.get_server_config().get('use_mock_repository', False))

    def get_base_uri(self) -> Optional[str]:
        return self.get_transform_config().get('base_uri')

    def get_contexts(self) -> Optional[str]:
        return self.get_transform_config().get('contexts')

    def get_action(self) -> Optional[str]:
        return self.get_transform_config().get('action')

    def require_clear_confirmation(self) -> bool:
        """
        Whether a clear without contexts must be refused.

        When false (the default), clearing without contexts removes every
        statement in the repository.
        """
        return bool(self.get_transform_config().get('require_clear_confirmation', False))

    def get_log_level(self) -> str:
        return str(self.get_app_config().get('log_level', 'INFO'))

    def validate_config(self) -> None:
        """
        Validate the loaded configuration.

        Raises:
            ConfigurationError: If configuration is invalid
        """
        server_url = self.get_server_url()
        if not server_url or not isinstance(server_url, str):
            raise ConfigurationError("Server URL must be a non-empty string")

        if not server_url.startswith(('http://', 'https://')):
            raise ConfigurationError("Server URL must start with http:// or https://")

        if self.get_timeout() <= 0:
            raise ConfigurationError("Request timeout must be positive")

        logger.debug("Configuration validation passed")

    def __str__(self) -> str:
        """String representation of the configuration."""
        return f"TransformerConfig(path={self.config_path}, sections={list(self.config_data.keys())})"


@dataclass
class TransformParameters:
    """Stage settings for one transformer instance after merging parameters over configuration."""
    server_url: str
    repository_id: str
    action: str
    base_uri: Optional[str] = None
    contexts: Optional[str] = None


def resolve_parameters(config: TransformerConfig, parameters: Optional[Mapping[str, Any]] = None) -> TransformParameters:
    """
    Merge per-invocation stage parameters over configuration defaults.

    Args:
        config: Configuration supplying defaults
        parameters: Stage parameters (``url``, ``repository``, ``base-uri``, ``contexts``, ``action``)

    Returns:
        TransformParameters for the stage

    Raises:
        ConfigurationError: If the repository or action is missing
    """
    parameters = parameters or {}

    def _param(name: str, default: Optional[str]) -> Optional[str]:
        value = parameters.get(name)
        return default if value is None else str(value)

    base_uri = _param(BASE_URI_PARAM, _param(BASE_URI_PARAM_ALIAS, config.get_base_uri()))
    repository_id = _param(REPOSITORY_ID_PARAM, config.get_repository_id())
    action = _param(ACTION_PARAM, config.get_action())

    if not repository_id:
        raise ConfigurationError(f"Missing required parameter: {REPOSITORY_ID_PARAM}")
    if not action:
        raise ConfigurationError(f"Missing required parameter: {ACTION_PARAM}")

    return TransformParameters(
        server_url=_param(URL_PARAM, config.get_server_url()),
        repository_id=repository_id,
        action=action,
        base_uri=base_uri or None,
        contexts=_param(CONTEXTS_PARAM, config.get_contexts()),
    )


def configure_logging(level: str = 'INFO') -> None:
    """
    Apply a log level name to the root logger.

    Args:
        level: Level name such as DEBUG or INFO; unknown names fall back to INFO
    """
    numeric_level = getattr(logging, str(level).upper(), logging.INFO)
    if not isinstance(numeric_level, int):
        numeric_level = logging.INFO

    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(format='%(asctime)s %(levelname)s %(name)s: %(message)s')
    root.setLevel(numeric_level)
