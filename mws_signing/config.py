"""Client configuration loaded from the environment."""

import os
from dataclasses import dataclass

from mws_signing.dispatcher import DEFAULT_TIMEOUT

DEFAULT_HOST = "mws.amazonservices.com"

ENV_HOST = "MWS_HOST"
ENV_SECRET_KEY = "MWS_SECRET_KEY"
ENV_TIMEOUT = "MWS_TIMEOUT"


@dataclass
class ClientConfig:
    """Connection settings shared by every request of a client."""

    secret_key: str
    host: str = DEFAULT_HOST
    timeout: float = DEFAULT_TIMEOUT

    @classmethod
    def from_env(cls) -> "ClientConfig":
        """
        Build a config from MWS_SECRET_KEY, MWS_HOST and MWS_TIMEOUT.

        Raises:
            RuntimeError: If MWS_SECRET_KEY is missing or MWS_TIMEOUT is not a number
        """
        secret_key = os.getenv(ENV_SECRET_KEY, "")
        if not secret_key:
            raise RuntimeError(f"Missing env var: {ENV_SECRET_KEY}")

        timeout_value = os.getenv(ENV_TIMEOUT, "")
        try:
            timeout = float(timeout_value) if timeout_value else DEFAULT_TIMEOUT
        except ValueError:
            raise RuntimeError(f"Invalid {ENV_TIMEOUT}: {timeout_value!r}") from None

        return cls(
            secret_key=secret_key,
            host=os.getenv(ENV_HOST, "") or DEFAULT_HOST,
            timeout=timeout,
        )

    def __repr__(self) -> str:
        return f"ClientConfig(host={self.host!r}, timeout={self.timeout!r}, secret_key='***')"
