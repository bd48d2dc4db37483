"""Configuration template substitution utilities."""

import os
import re
from pathlib import Path

import yaml
from loguru import logger
from pydantic_core import ValidationError

from minimal_api.runtime.config.config_data import (
    AppConfig,
    ConfigData,
    DatabaseConfig,
    JWTConfig,
    LoggingConfig,
)
from minimal_api.runtime.config.settings import EnvironmentVariables


def substitute_env_vars(text: str) -> str:
    """
    Substitute environment variable placeholders in text.

    Supports formats:
    - ${VAR_NAME} - required variable (raises error if missing)
    - ${VAR_NAME:-default} - optional with default value
    - ${VAR_NAME:?error_message} - required with custom error message
    """
    def replacer(match):
        var_expr = match.group(1)

        # Handle default values: ${VAR:-default}
        if ":-" in var_expr:
            var_name, default = var_expr.split(":-", 1)
            return os.getenv(var_name, default)

        # Handle error messages: ${VAR:?message}
        elif ":?" in var_expr:
            var_name, error_msg = var_expr.split(":?", 1)
            value = os.getenv(var_name)
            if value is None:
                raise ValueError(f"Required environment variable {var_name}: {error_msg}")
            return value

        # Handle required variables: ${VAR}
        else:
            var_name = var_expr
            value = os.getenv(var_name)
            if value is None:
                raise ValueError(f"Required environment variable {var_name} not set")
            return value

    def quoted_replacer(match):
        # Inside a single-quoted YAML scalar a quote is written twice
        return "'" + replacer(match).replace("'", "''") + "'"

    text = re.sub(r"'\$\{([^}]+)\}'", quoted_replacer, text)

    # Match ${...} patterns
    pattern = r'\$\{([^}]+)\}'
    return re.sub(pattern, replacer, text)


def load_templated_yaml(file_path: Path) -> ConfigData:
    """
    Load a YAML file with environment variable substitution.

    Args:
        file_path: Path to the YAML file

    Returns:
        Parsed YAML with environment variables substituted

    Raises:
        ValueError: If required environment variables are missing
        FileNotFoundError: If the YAML file doesn't exist
    """
    with open(file_path) as f:
        content = f.read()

    env_mode = os.getenv("APP_ENVIRONMENT", "development")
    logger.info(f"Loading configuration for environment: {env_mode}")

    # PRODUCTION_DATABASE_URL overrides DATABASE_URL when APP_ENVIRONMENT=production
    prefix = f"{env_mode.upper()}_"
    env_variables = [var for var in os.environ if var.startswith(prefix)]
    logger.info(f"Applying environment-specific overrides: {env_variables}")

    for var_name in env_variables:
        new_var_name = var_name[len(prefix):]
        os.environ[new_var_name] = os.environ[var_name]
        logger.debug(f"Set environment variable {new_var_name} from {var_name}")

    substituted_content = substitute_env_vars(content)

    try:
        loaded = yaml.safe_load(substituted_content)
        if not loaded:
            raise ValueError("Failed to parse YAML")
    except yaml.YAMLError as e:
        raise ValueError(f"Error parsing YAML: {e}") from e

    try:
        # Extract the 'config' section from the YAML structure
        config_data = loaded.get('config', {})
        config = ConfigData(**config_data)
    except ValidationError as e:
        raise ValueError(f"Invalid configuration: {e}") from e

    return config


def load_environment_config(env: EnvironmentVariables | None = None) -> ConfigData:
    """Build the configuration from environment variables and .env alone."""
    env = env or EnvironmentVariables()
    try:
        return ConfigData(
            app=AppConfig(
                environment=env.app_environment, host=env.app_host, port=env.app_port
            ),
            database=DatabaseConfig(url=env.database_url),
            jwt=JWTConfig(secret=env.jwt_secret),
            logging=LoggingConfig(level=env.log_level),
        )
    except ValidationError as e:
        raise ValueError(f"Invalid configuration: {e}") from e
