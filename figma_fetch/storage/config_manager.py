"""
Manages loading and saving of the INI configuration file and the access token.
"""

import configparser
import logging
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from figma_fetch.exceptions import ConfigurationError
from figma_fetch.models.config import FetchConfig

log = logging.getLogger(__name__)

TOKEN_ENV_VAR = "FIGMA_PERSONAL_ACCESS_TOKEN"


class ConfigManager:
    """
    Builds a validated FetchConfig from the INI file, the environment and CLI options.

    Precedence, lowest first: INI file defaults, environment, CLI options. The
    access token only ever comes from the environment.
    """

    def __init__(
        self, config_file_path: Path, environ: Mapping[str, str] | None = None
    ):
        self.config_file_path = config_file_path
        self.environ = os.environ if environ is None else environ
        self._parser = configparser.ConfigParser()

    def read_token(self) -> str:
        """
        Reads the access token from the environment.

        Raises:
            ConfigurationError: If the variable is not set.
        """
        token = self.environ.get(TOKEN_ENV_VAR, "").strip()
        if not token:
            raise ConfigurationError(
                f"Environment variable {TOKEN_ENV_VAR} is not set."
            )
        return token

    def load_config(self, cli_options: dict[str, Any] | None = None) -> FetchConfig:
        """
        Loads configuration, applies CLI overrides, and validates it.

        A missing INI file is not an error; built-in defaults are used instead.

        Raises:
            ConfigurationError: If the INI file is unreadable, the token is missing
            or validation fails.
        """
        config_data = self._get_config_as_dict()
        config_data["access_token"] = self.read_token()

        if cli_options:
            config_data.update(
                {key: value for key, value in cli_options.items() if value is not None}
            )

        try:
            return FetchConfig(**config_data)
        except PydanticValidationError as e:
            messages = "; ".join(
                f"{'.'.join(map(str, err['loc'])) or 'config'}: {err['msg']}"
                for err in e.errors()
            )
            raise ConfigurationError(
                f"Configuration validation failed: {messages}"
            ) from e

    def save_defaults(self, settings: dict[str, Any]) -> None:
        """
        Creates or overwrites the INI file with the given settings.

        Unknown keys and the access token are ignored.
        """
        config = configparser.ConfigParser()
        config["DEFAULT"] = {}
        defaults = FetchConfig.model_construct()

        for key in sorted(FetchConfig.get_ini_keys()):
            value = settings.get(key)
            if value is None:
                value = getattr(defaults, key, None)
            if value is not None:
                config["DEFAULT"][key] = str(value)

        try:
            self.config_file_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.config_file_path, "w", encoding="utf-8") as configfile:
                config.write(configfile)
        except OSError as e:
            raise ConfigurationError(f"Failed to save configuration file: {e}") from e
        log.debug(f"Configuration written to '{self.config_file_path}'")

    def _get_config_as_dict(self) -> dict[str, Any]:
        """Reads the 'DEFAULT' section of the INI file into a dictionary."""
        if not self.config_file_path.is_file():
            log.debug(
                f"No configuration file at '{self.config_file_path}', using defaults."
            )
            return {}

        try:
            self._parser.read(self.config_file_path, encoding="utf-8")
            section = self._parser["DEFAULT"]
            config_data: dict[str, Any] = {}
            for key in ("output_dir", "api_base_url"):
                if value := section.get(key, "").strip():
                    config_data[key] = value
            if "request_timeout" in section:
                config_data["request_timeout"] = section.getint("request_timeout")
        except (configparser.Error, ValueError) as e:
            raise ConfigurationError(f"Error parsing configuration file: {e}") from e

        return config_data
