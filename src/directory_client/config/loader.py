"""Configuration loading for the directory client."""

import json
import os
from typing import Optional

from pydantic import ValidationError

from .models import Config
from ..core.exceptions import DirectoryConfigError


CONFIG_ENV_VAR = "DIRECTORY_CLIENT_CONFIG"


def load_config(config_path: Optional[str] = None) -> Config:
    """
    Load configuration from a JSON file.

    Args:
        config_path: Path to the configuration file. Falls back to the
            DIRECTORY_CLIENT_CONFIG environment variable.

    Returns:
        Parsed configuration

    Raises:
        FileNotFoundError: If the file does not exist
        DirectoryConfigError: If the file is not valid JSON or fails validation
    """
    path = config_path or os.getenv(CONFIG_ENV_VAR)
    if not path:
        raise DirectoryConfigError(
            f"No configuration file given and {CONFIG_ENV_VAR} is not set"
        )

    if not os.path.exists(path):
        raise FileNotFoundError(f"Configuration file not found: {path}")

    with open(path, "r", encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise DirectoryConfigError(f"Invalid JSON in {path}: {e}") from e

    try:
        return Config.model_validate(data)
    except ValidationError as e:
        raise DirectoryConfigError(f"Invalid configuration in {path}: {e}") from e


def validate_config(config: Config) -> None:
    """
    Cross-field checks that cannot be expressed on a single model.

    Raises:
        DirectoryConfigError: If the configuration is unusable
    """
    directory = config.directory
    tls = directory.tls_config

    if tls.enabled:
        for label, path in (
            ("CA certificate", tls.ca_cert_path),
            ("client certificate", tls.cert_path),
            ("client key", tls.key_path),
        ):
            if path and not os.path.isfile(path):
                raise DirectoryConfigError(f"{label} file not found: {path}")

        if bool(tls.cert_path) != bool(tls.key_path):
            raise DirectoryConfigError("cert_path and key_path must be set together")

    if not directory.search_settings:
        raise DirectoryConfigError("At least one user search setting is required")
