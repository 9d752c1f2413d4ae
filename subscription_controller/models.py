"""
Callback request/response models.

Field names follow the SaaS provisioning callback payload (camelCase).
"""

import re
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .errors import InvalidEventError

# RFC 1123 label; the tenant host is "<subdomain>-<suffix>" and must stay a label too
SUBDOMAIN_PATTERN = re.compile(r"[a-z0-9]([-a-z0-9]*[a-z0-9])?")
MAX_LABEL_LENGTH = 63


def check_subdomain(subdomain: Optional[str]) -> str:
    """Return ``subdomain`` if it can name a tenant host, else raise InvalidEventError."""
    if not subdomain:
        raise InvalidEventError("subscribedSubdomain is required")
    if len(subdomain) > MAX_LABEL_LENGTH or not SUBDOMAIN_PATTERN.fullmatch(subdomain):
        raise InvalidEventError(f"subscribedSubdomain {subdomain!r} is not a valid DNS label")
    return subdomain


class TenantEvent(BaseModel):
    """Subscription / unsubscription callback body."""
    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="ignore")

    subscription_app_id: Optional[str] = Field(None, alias="subscriptionAppId")
    subscription_app_name: Optional[str] = Field(None, alias="subscriptionAppName")
    subscribed_tenant_id: Optional[str] = Field(None, alias="subscribedTenantId")
    subscribed_subdomain: str = Field(..., alias="subscribedSubdomain")
    global_account_guid: Optional[str] = Field(None, alias="globalAccountGUID")
    subscribed_license_type: Optional[str] = Field(None, alias="subscribedLicenseType")

    @field_validator("subscribed_subdomain")
    @classmethod
    def validate_subdomain(cls, value: str) -> str:
        return check_subdomain(value)


class SubscriptionEvent(TenantEvent):
    """Body of PUT callback/v1.0/tenants/*"""


class UnsubscriptionEvent(TenantEvent):
    """Body of DELETE callback/v1.0/tenants/*"""


class Dependency(BaseModel):
    """Entry of the dependencies callback response."""
    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="forbid")

    xsappname: Optional[str] = None
    app_name: Optional[str] = Field(None, alias="appName")
    app_id: Optional[str] = Field(None, alias="appId")

    @model_validator(mode="after")
    def check_identity(self) -> "Dependency":
        if self.xsappname:
            return self
        if self.app_name and self.app_id:
            return self
        raise ValueError("dependency needs xsappname, or both appName and appId")
