"""
APIRule API Client

Thin wrapper over the Kubernetes CustomObjectsApi for the namespaced APIRule
resources managed by the controller.
"""

import enum
import logging
from typing import Optional

import kubernetes
import urllib3

from .apirule import API_RULE_GROUP, API_RULE_PLURAL, API_RULE_VERSION

logger = logging.getLogger(__name__)

# Errors urllib3 raises when a request times out or the API server is unreachable
TRANSPORT_ERRORS = (urllib3.exceptions.HTTPError, OSError)


class ProbeResult(enum.Enum):
    PRESENT = "present"
    ABSENT = "absent"
    ERROR = "error"


class ApiRuleClient:
    """Client for APIRule custom objects in a single namespace."""

    def __init__(
        self,
        namespace: str,
        timeout: float,
        api: Optional[kubernetes.client.CustomObjectsApi] = None,
    ):
        self.namespace = namespace
        self.timeout = timeout
        self._api = api

    @property
    def api(self) -> kubernetes.client.CustomObjectsApi:
        if self._api is None:
            self._api = kubernetes.client.CustomObjectsApi()
        return self._api

    # =========================================================================
    # CRUD
    # =========================================================================

    def get(self, name: str) -> dict:
        """Get an APIRule. Raises ApiException (404 when absent)."""
        return self.api.get_namespaced_custom_object(
            group=API_RULE_GROUP,
            version=API_RULE_VERSION,
            namespace=self.namespace,
            plural=API_RULE_PLURAL,
            name=name,
            _request_timeout=self.timeout,
        )

    def create(self, body: dict) -> dict:
        """Create an APIRule. Raises ApiException (409 when it already exists)."""
        return self.api.create_namespaced_custom_object(
            group=API_RULE_GROUP,
            version=API_RULE_VERSION,
            namespace=self.namespace,
            plural=API_RULE_PLURAL,
            body=body,
            _request_timeout=self.timeout,
        )

    def delete(self, name: str) -> dict:
        """Delete an APIRule. Raises ApiException (404 when absent)."""
        return self.api.delete_namespaced_custom_object(
            group=API_RULE_GROUP,
            version=API_RULE_VERSION,
            namespace=self.namespace,
            plural=API_RULE_PLURAL,
            name=name,
            _request_timeout=self.timeout,
        )

    # =========================================================================
    # Existence probe
    # =========================================================================

    def probe(self, name: str) -> ProbeResult:
        """
        Check whether an APIRule exists.

        Only a successful lookup reports PRESENT. A 404 reports ABSENT; any
        other API error or a timeout reports ERROR, since the lookup cannot
        tell whether the resource is there.
        """
        try:
            self.get(name)
            return ProbeResult.PRESENT
        except kubernetes.client.ApiException as e:
            if e.status == 404:
                return ProbeResult.ABSENT
            logger.warning(f"Lookup of APIRule {self.namespace}/{name} failed: {e.status} {e.reason}")
            return ProbeResult.ERROR
        except TRANSPORT_ERRORS as e:
            logger.warning(f"Lookup of APIRule {self.namespace}/{name} failed: {e}")
            return ProbeResult.ERROR


def load_kube_config() -> None:
    """Load in-cluster Kubernetes config, falling back to the local kubeconfig."""
    try:
        kubernetes.config.load_incluster_config()
        logger.info("Loaded in-cluster Kubernetes config")
    except kubernetes.config.ConfigException:
        kubernetes.config.load_kube_config()
        logger.info("Loaded kubeconfig")
