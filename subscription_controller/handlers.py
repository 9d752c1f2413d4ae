"""
Tenant callback handlers.

Business logic behind the subscription callbacks, independent of the HTTP
layer: derive the tenant host from the event and reconcile its APIRule.
"""

import logging

from .apirule import tenant_host, tenant_url
from .config import ControllerConfig
from .errors import InvalidEventError
from .models import MAX_LABEL_LENGTH, SubscriptionEvent, UnsubscriptionEvent, check_subdomain
from .sync import ApiRuleSynchronizer

logger = logging.getLogger(__name__)


class TenantCallbackHandler:
    """
    Handles subscribe / unsubscribe events for tenants.

    Example:
        handler = TenantCallbackHandler(config, ApiRuleSynchronizer(config, client))
        url = await handler.subscribe(SubscriptionEvent(subscribedSubdomain="acme"))
        # https://acme-approuter.<cluster-domain>
    """

    def __init__(self, config: ControllerConfig, synchronizer: ApiRuleSynchronizer):
        self.config = config
        self.synchronizer = synchronizer

    def host_for(self, subdomain: str) -> str:
        """Validate ``subdomain`` and derive the tenant host from it."""
        host = tenant_host(check_subdomain(subdomain), self.config.host_suffix)
        if len(host) > MAX_LABEL_LENGTH:
            raise InvalidEventError(f"Tenant host {host!r} exceeds {MAX_LABEL_LENGTH} characters")
        return host

    async def subscribe(self, event: SubscriptionEvent) -> str:
        """
        Onboard a tenant.

        Ensures the tenant's APIRule exists and returns the tenant access URL,
        whether the APIRule was created now or existed already.

        Raises:
            InvalidEventError: the subdomain cannot name a tenant host
            ProvisioningError: the APIRule could not be created
        """
        subdomain = event.subscribed_subdomain
        host = self.host_for(subdomain)
        url = tenant_url(subdomain, self.config.host_suffix, self.config.cluster_domain)

        logger.info(f"Subscribing tenant {subdomain} (tenant id {event.subscribed_tenant_id})")
        result = await self.synchronizer.ensure(host)
        logger.info(f"Tenant {subdomain} subscribed ({result.value}): {url}")
        return url

    async def unsubscribe(self, event: UnsubscriptionEvent) -> str:
        """
        Offboard a tenant.

        Deletion of the APIRule is best effort; the confirmation is returned
        whatever its outcome.

        Raises:
            InvalidEventError: the subdomain cannot name a tenant host
        """
        subdomain = event.subscribed_subdomain
        host = self.host_for(subdomain)

        logger.info(f"Unsubscribing tenant {subdomain} (tenant id {event.subscribed_tenant_id})")
        result = await self.synchronizer.remove(host)
        logger.info(f"Tenant {subdomain} unsubscribed (APIRule {result.value})")
        return f"Tenant {subdomain} unsubscribed"
