"""Callback model tests."""

import pytest
from pydantic import ValidationError

from subscription_controller.errors import InvalidEventError
from subscription_controller.models import (
    Dependency,
    SubscriptionEvent,
    UnsubscriptionEvent,
    check_subdomain,
)

PAYLOAD = {
    "subscriptionAppId": "app-id",
    "subscriptionAppName": "myapp",
    "subscribedTenantId": "0a1b2c3d",
    "subscribedSubdomain": "acme",
    "globalAccountGUID": "ga-guid",
    "subscribedLicenseType": "TRIAL",
}


class TestTenantEvent:
    def test_full_payload(self):
        event = SubscriptionEvent.model_validate(PAYLOAD)
        assert event.subscribed_subdomain == "acme"
        assert event.subscribed_tenant_id == "0a1b2c3d"
        assert event.global_account_guid == "ga-guid"
        assert event.subscribed_license_type == "TRIAL"

    def test_only_subdomain_required(self):
        event = UnsubscriptionEvent.model_validate({"subscribedSubdomain": "acme"})
        assert event.subscribed_subdomain == "acme"
        assert event.subscription_app_id is None

    def test_unknown_fields_ignored(self):
        event = SubscriptionEvent.model_validate({**PAYLOAD, "userId": "someone"})
        assert not hasattr(event, "userId")

    def test_immutable(self):
        event = SubscriptionEvent.model_validate(PAYLOAD)
        with pytest.raises(ValidationError):
            event.subscribed_subdomain = "other"

    def test_missing_subdomain(self):
        payload = {k: v for k, v in PAYLOAD.items() if k != "subscribedSubdomain"}
        with pytest.raises(ValidationError):
            SubscriptionEvent.model_validate(payload)

    @pytest.mark.parametrize("subdomain", ["", "Acme", "acme_corp", "-acme", "acme-", "a.b", "x" * 64, "acme\n", " acme", "acme "])
    def test_invalid_subdomain(self, subdomain):
        with pytest.raises(ValidationError):
            SubscriptionEvent.model_validate({**PAYLOAD, "subscribedSubdomain": subdomain})


class TestCheckSubdomain:
    @pytest.mark.parametrize("subdomain", ["acme\n", "acme\r\n", "\nacme", " acme"])
    def test_rejects_surrounding_whitespace(self, subdomain):
        with pytest.raises(InvalidEventError, match="not a valid DNS label"):
            check_subdomain(subdomain)

    @pytest.mark.parametrize("subdomain", ["acme", "acme-corp", "a1", "9"])
    def test_valid(self, subdomain):
        assert check_subdomain(subdomain) == subdomain

    @pytest.mark.parametrize("subdomain", [None, ""])
    def test_required(self, subdomain):
        with pytest.raises(InvalidEventError, match="required"):
            check_subdomain(subdomain)


class TestDependency:
    def test_xsappname(self):
        dep = Dependency.model_validate({"xsappname": "destination-xsapp"})
        assert dep.model_dump(by_alias=True, exclude_none=True) == {"xsappname": "destination-xsapp"}

    def test_app_name_and_id(self):
        dep = Dependency.model_validate({"appName": "connectivity", "appId": "conn-id"})
        assert dep.model_dump(by_alias=True, exclude_none=True) == {
            "appName": "connectivity",
            "appId": "conn-id",
        }

    @pytest.mark.parametrize("payload", [{}, {"appName": "connectivity"}, {"appId": "conn-id"}])
    def test_incomplete(self, payload):
        with pytest.raises(ValidationError):
            Dependency.model_validate(payload)
