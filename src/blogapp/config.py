import logging
import os
import re
import tomllib

from blogapp.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

CONFIG_FILES = [".blogapp.toml", "blogapp.toml", "pyproject.toml"]


def _default_config():
    """Return the default configuration for a BlogApp application.

    This is placed in a separate function so that each caller receives a fresh copy of
    the defaults, which tests can manipulate without affecting one another.
    """
    return {
        "env": None,
        "testing": False,
        "debug": False,
        "secret_key": "${SECRET_KEY|secret-key-that-is-not-so-secret}",
        "databases": {
            "default": {"provider": "memory"},
        },
        # Seconds a Unit of Work may take before it is aborted. `None` for no limit.
        "default_timeout": None,
        # An optional `logging.config.dictConfig` mapping
        "logging": {},
    }


class Config(dict):
    ENV_VAR_PATTERN = re.compile(r"\$\{([^}]+)\}")

    @classmethod
    def load_from_dict(cls, config: dict = None):
        """Load configuration from a dictionary."""
        config = cls._normalize_config(config or {})
        return cls(**cls._load_env_vars(config))

    @classmethod
    def load_from_path(cls, path: str):
        """Load configuration from the first config file found at `path`, or in up to
        2 parent directories. `pyproject.toml` files are read from `[tool.blogapp]`.
        """

        def find_config_file(directory: str):
            for config_file in CONFIG_FILES:
                config_file_path = os.path.join(directory, config_file)
                if os.path.exists(config_file_path):
                    return config_file_path
            return None

        path = os.path.abspath(path)
        current_dir = path if os.path.isdir(path) else os.path.dirname(path)
        config_file_name = None

        for _ in range(3):  # Check the current directory and up to 2 parent directories
            config_file_name = find_config_file(current_dir)
            if config_file_name:
                break

            current_dir = os.path.dirname(current_dir)

        if not config_file_name:
            raise ConfigurationError(f"No configuration file found in {path}")

        logger.debug(f"Loading configuration from {config_file_name}")
        with open(config_file_name, "rb") as f:
            config = tomllib.load(f)

        if config_file_name.endswith("pyproject.toml"):
            config = config.get("tool", {}).get("blogapp", {})

        return cls.load_from_dict(config)

    @classmethod
    def _normalize_config(cls, config):
        """Merge known keys of `config` over the defaults, and then apply the section
        named by the `BLOGAPP_ENV` environment variable, if present.
        """
        environment = os.environ.get("BLOGAPP_ENV") or None

        keys = _default_config().keys()
        finalized_config = {key: value for key, value in config.items() if key in keys}

        finalized_config = cls._deep_merge(_default_config(), finalized_config)

        if environment and environment in config:
            finalized_config = cls._deep_merge(finalized_config, config[environment])
            finalized_config["env"] = environment

        return finalized_config

    @classmethod
    def _deep_merge(cls, dict1: dict, dict2: dict):
        result = dict1.copy()
        for key, value in dict2.items():
            if (
                key in result
                and isinstance(result[key], dict)
                and isinstance(value, dict)
            ):
                result[key] = cls._deep_merge(result[key], value)
            else:
                result[key] = value
        return result

    @classmethod
    def _load_env_vars(cls, config):
        if isinstance(config, dict):
            for key, value in config.items():
                if isinstance(value, str):
                    config[key] = cls._replace_env_var(value)
                elif isinstance(value, dict):
                    config[key] = cls._load_env_vars(value)
        return config

    @classmethod
    def _replace_env_var(cls, value):
        """Replace environment variables in a string.

        Supports `${ENV_VAR}` and `${ENV_VAR|default-value}`, any number of times in
        one string. Raises `ConfigurationError` for unset variables without defaults.
        """
        match = cls.ENV_VAR_PATTERN.search(value)
        while match:
            matched_string = match.group(1)

            if "|" in matched_string:
                env_var, default_value = matched_string.split("|", 1)
                env_value = os.getenv(env_var, default_value)
            else:
                env_value = os.getenv(matched_string)

            if env_value is None:
                raise ConfigurationError(
                    f"Environment variable {matched_string} is not set"
                )

            value = value.replace(f"${{{matched_string}}}", env_value)
            match = cls.ENV_VAR_PATTERN.search(value)

        return value
