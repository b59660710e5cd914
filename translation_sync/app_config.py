"""Application configuration module for the translation sync."""
import json
import logging
import os
import sys
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

import jsonschema
import yaml
from dotenv import load_dotenv

from translation_sync.logging_config import setup_logger

# Credentials can be stored in this file as a JSON object with "user" and
# "password" keys. An API token can be used as the password.
AUTH_FILE_NAME = 'transifex.auth'
DEFAULT_CONFIG_FILE_NAME = 'config.yaml'

DEFAULT_USER = 'api'

CREDENTIALS_SCHEMA = {
    "type": "object",
    "required": ["user", "password"],
    "properties": {
        "user": {"type": "string"},
        "password": {"type": "string"}
    }
}

CONFIG_SCHEMA = {
    "type": "object",
    "properties": {
        "credentials": CREDENTIALS_SCHEMA,
        "out_directory": {"type": "string", "minLength": 1},
        "organization_id": {"type": "string"},
        "project_id": {"type": "string"},
        "resource_ids": {"type": "array", "items": {"type": "string"}},
        "reviewed_only": {
            "anyOf": [
                {"type": "boolean"},
                {"type": "array", "items": {"type": "string"}}
            ]
        },
        "source_locale": {"type": "string", "minLength": 1},
        "api_root": {"type": "string"},
        "organization_api_root": {"type": "string"},
        "dispatch_interval": {"type": "number", "exclusiveMinimum": 0},
        "request_timeout": {"type": ["number", "null"], "exclusiveMinimum": 0},
        "logging": {"type": ["object", "null"]}
    }
}


class ConfigError(Exception):
    """Configuration or credentials could not be loaded."""


@dataclass
class Credentials:
    """HTTP Basic credentials for the Transifex API."""
    user: str = DEFAULT_USER
    password: str = ''


@dataclass
class SyncConfig:
    """Options for one sync run."""
    credentials: Credentials = field(default_factory=Credentials)
    out_directory: str = 'dist'
    organization_id: str = ''
    project_id: str = ''
    resource_ids: List[str] = field(default_factory=lambda: ['presets'])
    # True for every locale, or a list of locale codes
    reviewed_only: Union[bool, List[str]] = False
    source_locale: str = 'en'

    api_root: str = 'https://www.transifex.com/api/2'
    organization_api_root: str = 'https://api.transifex.com'
    dispatch_interval: float = 0.2
    request_timeout: Optional[float] = None

    @property
    def translations_directory(self) -> str:
        return os.path.join(self.out_directory, 'translations')


def _load_dotenv_files(base_dir: str) -> None:
    """Load a .env file from the working directory if there is one."""
    dotenv_path = os.path.join(base_dir, '.env')
    if os.path.exists(dotenv_path):
        load_dotenv(dotenv_path)


def _load_yaml_config(base_dir: str) -> Dict[str, Any]:
    """
    Load the YAML configuration file.

    TRANSLATION_SYNC_CONFIG_FILE overrides the default ``config.yaml`` in the
    working directory. A missing file means every option takes its default.

    Raises:
        ConfigError: If the file is unreadable, not valid YAML, or not a mapping.
    """
    default_config_path = os.path.join(base_dir, DEFAULT_CONFIG_FILE_NAME)
    config_file = os.environ.get('TRANSLATION_SYNC_CONFIG_FILE', default_config_path)

    if not os.path.isabs(config_file):
        config_file = os.path.abspath(config_file)

    if not os.path.exists(config_file):
        print(f"Warning: Configuration file '{config_file}' not found. Using default configuration.",
              file=sys.stderr)
        return {}

    try:
        with open(config_file, 'r', encoding='utf-8') as config_file_stream:
            loaded_config = yaml.safe_load(config_file_stream)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in configuration file '{config_file}': {e}") from e
    except OSError as e:
        raise ConfigError(f"Could not read configuration file '{config_file}': {e}") from e

    if loaded_config is None:
        print(f"Warning: Configuration file '{config_file}' is empty. Using default configuration.",
              file=sys.stderr)
        return {}
    if not isinstance(loaded_config, dict):
        raise ConfigError(f"Configuration file '{config_file}' must contain a YAML dictionary.")
    return loaded_config


def _setup_logger_from_config(config: Dict[str, Any]) -> logging.Logger:
    """Set up logger based on configuration."""
    log_config = config.get('logging') or {}
    log_level_str = log_config.get('log_level', 'INFO').upper()
    log_file_path = log_config.get('log_file_path', 'logs/translation_sync.log')
    log_to_console = log_config.get('log_to_console', True)
    return setup_logger(log_level_str, log_file_path, log_to_console)


def _log_dotenv_status(logger: logging.Logger, base_dir: str) -> None:
    dotenv_path = os.path.join(base_dir, '.env')
    if os.path.exists(dotenv_path):
        logger.info("Loaded environment variables from: %s", dotenv_path)
    else:
        logger.debug("No .env file found in '%s'. Relying on system environment variables if any.", base_dir)


def load_credentials(base_dir: str) -> Credentials:
    """
    Resolve Transifex credentials when none are given inline.

    The ``transifex.auth`` file in ``base_dir`` wins over the TRANSIFEX_USER
    and TRANSIFEX_PASSWORD environment variables, which win over the defaults.

    Raises:
        ConfigError: If the auth file exists but cannot be used.
    """
    auth_path = os.path.join(base_dir, AUTH_FILE_NAME)
    if os.path.exists(auth_path):
        try:
            with open(auth_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigError(f"Credentials file '{auth_path}' is not valid JSON: {e}") from e
        except OSError as e:
            raise ConfigError(f"Could not read credentials file '{auth_path}': {e}") from e
        try:
            jsonschema.validate(data, CREDENTIALS_SCHEMA)
        except jsonschema.ValidationError as e:
            raise ConfigError(f"Credentials file '{auth_path}' is invalid: {e.message}") from e
        return Credentials(user=data['user'], password=data['password'])

    return Credentials(
        user=os.environ.get('TRANSIFEX_USER') or DEFAULT_USER,
        password=os.environ.get('TRANSIFEX_PASSWORD', ''),
    )


def build_sync_config(options: Dict[str, Any], base_dir: Optional[str] = None) -> SyncConfig:
    """
    Build a SyncConfig from a plain options mapping.

    Args:
        options: Option values; anything missing takes its default.
        base_dir: Directory searched for the credentials file. Defaults to the
            current working directory.

    Returns:
        SyncConfig: The validated configuration.

    Raises:
        ConfigError: If an option has the wrong type or credentials cannot be loaded.
    """
    try:
        jsonschema.validate(options, CONFIG_SCHEMA)
    except jsonschema.ValidationError as e:
        location = '.'.join(str(part) for part in e.absolute_path) or 'configuration'
        raise ConfigError(f"Invalid option '{location}': {e.message}") from e

    if 'credentials' in options:
        inline = options['credentials']
        credentials = Credentials(user=inline['user'], password=inline['password'])
    else:
        credentials = load_credentials(base_dir or os.getcwd())

    defaults = SyncConfig()
    return SyncConfig(
        credentials=credentials,
        out_directory=options.get('out_directory', defaults.out_directory),
        organization_id=options.get('organization_id', defaults.organization_id),
        project_id=options.get('project_id', defaults.project_id),
        resource_ids=list(options.get('resource_ids', defaults.resource_ids)),
        reviewed_only=options.get('reviewed_only', defaults.reviewed_only),
        source_locale=options.get('source_locale', defaults.source_locale),
        api_root=options.get('api_root', defaults.api_root).rstrip('/'),
        organization_api_root=options.get('organization_api_root', defaults.organization_api_root).rstrip('/'),
        dispatch_interval=options.get('dispatch_interval', defaults.dispatch_interval),
        request_timeout=options.get('request_timeout', defaults.request_timeout),
    )


def load_app_config() -> SyncConfig:
    """
    Load the sync configuration from the YAML file, .env and credentials file.

    Also configures the ``translation_sync`` logger from the ``logging``
    section of the YAML file.

    Returns:
        SyncConfig: The loaded configuration.
    """
    base_dir = os.getcwd()

    _load_dotenv_files(base_dir)
    config = _load_yaml_config(base_dir)
    logger = _setup_logger_from_config(config)
    _log_dotenv_status(logger, base_dir)

    sync_config = build_sync_config(config, base_dir)
    if not sync_config.project_id:
        logger.warning("No project_id configured; requests will not resolve to a Transifex project.")
    return sync_config
