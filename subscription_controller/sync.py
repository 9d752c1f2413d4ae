"""
APIRule Synchronizer

Reconciles the APIRule of a single tenant host against the cluster:

    ensure(host)  create the APIRule unless it is already there
    remove(host)  delete the APIRule, best effort

Nothing is cached between calls; every call asks the API server. The
blocking Kubernetes client runs in a worker thread so a request only
suspends itself while waiting on the cluster.
"""

import asyncio
import enum
import logging

import kubernetes

from .apirule import api_rule_name, build_api_rule
from .apirule_client import TRANSPORT_ERRORS, ApiRuleClient, ProbeResult
from .config import ControllerConfig
from .errors import ProvisioningError, TemporaryError

logger = logging.getLogger(__name__)


class EnsureResult(enum.Enum):
    CREATED = "created"
    EXISTS = "exists"


class RemoveResult(enum.Enum):
    DELETED = "deleted"
    ABSENT = "absent"
    FAILED = "failed"


class ApiRuleSynchronizer:
    """Create-if-absent / delete-if-present for tenant APIRules."""

    def __init__(self, config: ControllerConfig, client: ApiRuleClient):
        self.config = config
        self.client = client
        self.orphaned_deletions = 0

    def desired(self, host: str) -> dict:
        return build_api_rule(
            service_name=self.config.service_name,
            service_port=self.config.service_port,
            host=host,
            cluster_domain=self.config.cluster_domain,
            namespace=self.config.namespace,
            gateway=self.config.gateway,
        )

    async def ensure(self, host: str) -> EnsureResult:
        """
        Make sure the APIRule for ``host`` exists.

        A failed lookup is not distinguished from a missing resource: both
        lead to a single create attempt. A 409 on create means a concurrent
        request won the race and counts as success.

        Raises:
            TemporaryError: the create call timed out or could not reach the API server
            ProvisioningError: the API server rejected the create
        """
        body = self.desired(host)
        name = body["metadata"]["name"]
        namespace = self.config.namespace

        probe = await asyncio.to_thread(self.client.probe, name)
        if probe is ProbeResult.PRESENT:
            logger.info(f"APIRule {namespace}/{name} already exists")
            return EnsureResult.EXISTS
        if probe is ProbeResult.ERROR:
            # Could be a real outage hidden behind the create below
            logger.warning(f"Existence of APIRule {namespace}/{name} unknown, attempting create")

        try:
            await asyncio.to_thread(self.client.create, body)
        except kubernetes.client.ApiException as e:
            if e.status == 409:
                logger.info(f"APIRule {namespace}/{name} was created concurrently")
                return EnsureResult.EXISTS
            logger.error(f"Failed to create APIRule {namespace}/{name}: {e.status} {e.reason}")
            raise ProvisioningError(name, f"{e.status} {e.reason}") from e
        except TRANSPORT_ERRORS as e:
            logger.warning(f"Create of APIRule {namespace}/{name} did not complete: {e}")
            raise TemporaryError(name, str(e)) from e

        logger.info(f"Created APIRule {namespace}/{name}")
        return EnsureResult.CREATED

    async def remove(self, host: str) -> RemoveResult:
        """
        Delete the APIRule for ``host`` without checking for it first.

        Never raises. A failure leaves an orphaned APIRule behind; it is
        logged and counted in ``orphaned_deletions``.
        """
        name = api_rule_name(host)
        namespace = self.config.namespace

        try:
            await asyncio.to_thread(self.client.delete, name)
        except kubernetes.client.ApiException as e:
            if e.status == 404:
                logger.info(f"APIRule {namespace}/{name} already absent")
                return RemoveResult.ABSENT
            return self._orphaned(name, f"{e.status} {e.reason}")
        except TRANSPORT_ERRORS as e:
            return self._orphaned(name, str(e))

        logger.info(f"Deleted APIRule {namespace}/{name}")
        return RemoveResult.DELETED

    def _orphaned(self, name: str, reason: str) -> RemoveResult:
        self.orphaned_deletions += 1
        logger.error(
            f"Failed to delete APIRule {self.config.namespace}/{name}, "
            f"resource orphaned (total orphaned: {self.orphaned_deletions}): {reason}"
        )
        return RemoveResult.FAILED
