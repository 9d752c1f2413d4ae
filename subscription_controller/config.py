"""
Controller configuration.

Read once from the process environment at startup and passed explicitly to
the synchronizer and the callback handlers.
"""

import json
import math
import os
from dataclasses import dataclass, field
from typing import Optional

from .errors import ConfigurationError

DEFAULT_SERVICE_NAME = "approuter"
DEFAULT_SERVICE_PORT = 5000
DEFAULT_HOST_SUFFIX = "approuter"
DEFAULT_GATEWAY = "kyma-gateway.kyma-system.svc.cluster.local"
DEFAULT_API_TIMEOUT = 10.0


@dataclass(frozen=True)
class ControllerConfig:
    """Process-wide settings for tenant routing."""
    cluster_domain: str
    namespace: str
    service_name: str = DEFAULT_SERVICE_NAME
    service_port: int = DEFAULT_SERVICE_PORT
    host_suffix: str = DEFAULT_HOST_SUFFIX
    gateway: str = DEFAULT_GATEWAY
    api_timeout: float = DEFAULT_API_TIMEOUT  # seconds, per platform API call
    dependencies: tuple = field(default_factory=tuple)

    def __post_init__(self):
        if not self.cluster_domain:
            raise ConfigurationError("cluster_domain must be set")
        if not self.namespace:
            raise ConfigurationError("namespace must be set")
        if not math.isfinite(self.api_timeout) or self.api_timeout <= 0:
            raise ConfigurationError(f"api_timeout must be a positive number, got {self.api_timeout}")

    @classmethod
    def from_env(cls, environ: Optional[dict] = None) -> "ControllerConfig":
        """
        Build the configuration from environment variables.

        Required:
            CLUSTER_DOMAIN: domain the tenant hosts are exposed under
            NAMESPACE: namespace the APIRules are created in

        Optional:
            SERVICE_NAME, SERVICE_PORT: routing target of every tenant host
            HOST_SUFFIX: appended to the subdomain to form the tenant host
            GATEWAY: gateway the APIRules are bound to
            API_TIMEOUT: timeout in seconds for each Kubernetes API call
            SAAS_DEPENDENCIES: JSON array returned by the dependencies callback
        """
        env = os.environ if environ is None else environ

        missing = [key for key in ("CLUSTER_DOMAIN", "NAMESPACE") if not env.get(key)]
        if missing:
            raise ConfigurationError(f"Missing required environment variables: {', '.join(missing)}")

        try:
            service_port = int(env.get("SERVICE_PORT", DEFAULT_SERVICE_PORT))
            api_timeout = float(env.get("API_TIMEOUT", DEFAULT_API_TIMEOUT))
        except ValueError as e:
            raise ConfigurationError(f"Invalid numeric setting: {e}") from e

        return cls(
            cluster_domain=env["CLUSTER_DOMAIN"],
            namespace=env["NAMESPACE"],
            service_name=env.get("SERVICE_NAME", DEFAULT_SERVICE_NAME),
            service_port=service_port,
            host_suffix=env.get("HOST_SUFFIX", DEFAULT_HOST_SUFFIX),
            gateway=env.get("GATEWAY", DEFAULT_GATEWAY),
            api_timeout=api_timeout,
            dependencies=parse_dependencies(env.get("SAAS_DEPENDENCIES", "")),
        )


def parse_dependencies(raw: str) -> tuple:
    """Parse the SAAS_DEPENDENCIES JSON array into a tuple of dicts."""
    if not raw.strip():
        return ()

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"SAAS_DEPENDENCIES is not valid JSON: {e}") from e

    if not isinstance(data, list) or not all(isinstance(item, dict) for item in data):
        raise ConfigurationError("SAAS_DEPENDENCIES must be a JSON array of objects")

    return tuple(data)
