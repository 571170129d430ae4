"""Environment variable substitution for configuration templates."""

import os
import re

_PLACEHOLDER = re.compile(r"\$\{([^}]+)\}")


def _resolve(expression: str) -> str:
    # ${VAR:-default}
    if ":-" in expression:
        name, default = expression.split(":-", 1)
        return os.getenv(name, default)

    # ${VAR:?message}
    if ":?" in expression:
        name, message = expression.split(":?", 1)
        value = os.getenv(name)
        if value is None:
            raise ValueError(f"Required environment variable {name}: {message}")
        return value

    value = os.getenv(expression)
    if value is None:
        raise ValueError(f"Required environment variable {expression} not set")
    return value


def substitute_env_vars(text: str) -> str:
    """
    Substitute environment variable placeholders in text.

    Supports formats:
    - ${VAR_NAME} - required variable (raises error if missing)
    - ${VAR_NAME:-default} - optional with default value
    - ${VAR_NAME:?error_message} - required with custom error message
    """
    return _PLACEHOLDER.sub(lambda match: _resolve(match.group(1)), text)
