"""
Credential Manager Module
Loads the Gemini API key from the environment (optionally via a .env file).
"""

import os
from pathlib import Path
from typing import Optional, cast

import structlog
from dotenv import load_dotenv
from rich.console import Console

console = Console(stderr=True)
logger = structlog.get_logger(__name__)

GEMINI_API_KEY_VAR = "GEMINI_API_KEY"


class MissingCredentialError(ValueError):
    """Raised when a required credential is not configured."""

    pass


class CredentialManager:
    """Reads credentials from the process environment after loading .env."""

    def __init__(self, env_file: Path = Path(".env")):
        """
        Initialize credential manager.

        Args:
            env_file: Path to .env file; existing environment variables win
        """
        self.env_file = env_file
        if self.env_file.exists():
            load_dotenv(self.env_file, override=False)
            logger.info("credentials_loaded_from_env", env_file=str(self.env_file))
        else:
            logger.debug("no_env_file_found", env_file=str(self.env_file))

    def get_credential(self, key: str, required: bool = True) -> Optional[str]:
        """
        Get credential from the environment.

        Args:
            key: Environment variable name (e.g., "GEMINI_API_KEY")
            required: Whether the credential must be present

        Returns:
            Credential value, or None if optional and not set

        Raises:
            MissingCredentialError: If a required credential is missing or blank
        """
        value = os.getenv(key, "").strip()
        if value:
            logger.debug(
                "credential_found_in_env", key=key, masked=self.mask_credential(value)
            )
            return value

        if required:
            console.print(f"[red][X] Missing {key} in environment variables[/red]")
            logger.critical("required_credential_not_provided", key=key)
            raise MissingCredentialError(f"Required credential not provided: {key}")

        return None

    def get_gemini_api_key(self) -> str:
        """Return the Gemini API key, raising MissingCredentialError if unset."""
        return cast(str, self.get_credential(GEMINI_API_KEY_VAR, required=True))

    @staticmethod
    def mask_credential(value: str, show_chars: int = 3) -> str:
        """
        Mask credential for display in logs.

        Args:
            value: Credential value to mask
            show_chars: Number of characters to show at start

        Returns:
            Masked credential (e.g., "abc***")
        """
        if not value or len(value) <= show_chars:
            return "***"
        return f"{value[:show_chars]}{'*' * (len(value) - show_chars)}"
