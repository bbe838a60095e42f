"""Secret Manager Client - Imperative Shell.

Reads channel credentials and API keys from Google Cloud Secret Manager,
and resolves the '${...}' placeholders used in configuration files:

    ${LINE_CHANNEL_SECRET}         -> environment variable
    ${secret:line-channel-secret}  -> Secret Manager, latest version
"""

import logging
import os
from dataclasses import dataclass

from google.cloud import secretmanager


logger = logging.getLogger(__name__)


SECRET_PREFIX = "secret:"


@dataclass
class SecretManagerConfig:
    """Configuration for Secret Manager client.

    Attributes:
        project_id: GCP project ID (None for default)
    """
    project_id: str | None = None


class SecretManagerClient:
    """Client for reading secrets from Google Cloud Secret Manager.

    This is part of the imperative shell - it handles secret I/O.
    """

    def __init__(self, config: SecretManagerConfig | None = None) -> None:
        self.config = config or SecretManagerConfig()
        self._client: secretmanager.SecretManagerServiceClient | None = None

    @property
    def client(self) -> secretmanager.SecretManagerServiceClient:
        """Lazy initialization of Secret Manager client."""
        if self._client is None:
            self._client = secretmanager.SecretManagerServiceClient()
        return self._client

    def get_secret(self, secret_name: str, version: str = "latest") -> str | None:
        """Fetch a secret value.

        This method performs I/O.

        Args:
            secret_name: Name of the secret (not the full resource path)
            version: Version of the secret

        Returns:
            Secret value, or None if unavailable
        """
        if not self.config.project_id:
            logger.error("No project ID configured for Secret Manager")
            return None

        name = f"projects/{self.config.project_id}/secrets/{secret_name}/versions/{version}"

        try:
            response = self.client.access_secret_version(request={"name": name})
            logger.info("Fetched secret: %s", secret_name)
            return response.payload.data.decode("UTF-8")
        except Exception as e:
            logger.error("Failed to fetch secret %s: %s", secret_name, str(e))
            return None

    def get_secret_or_env(self, secret_name: str, env_var_name: str) -> str | None:
        """Try Secret Manager first, then an environment variable."""
        value = self.get_secret(secret_name)
        if value:
            return value

        env_value = os.environ.get(env_var_name)
        if env_value:
            logger.info("Using environment variable %s (secret %s unavailable)", env_var_name, secret_name)
        return env_value

    def resolve(self, value: str) -> str:
        """Resolve a '${...}' placeholder.

        Values that are not placeholders, and placeholders that cannot be
        resolved, are returned unchanged.

        Args:
            value: Raw configuration value

        Returns:
            Resolved value
        """
        if not (value.startswith("${") and value.endswith("}")):
            return value

        reference = value[2:-1]
        if reference.startswith(SECRET_PREFIX):
            secret = self.get_secret(reference[len(SECRET_PREFIX):])
            return secret if secret is not None else value

        env_value = os.environ.get(reference)
        if env_value:
            return env_value

        logger.warning("Environment variable %s not set", reference)
        return value
