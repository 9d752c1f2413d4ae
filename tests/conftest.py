"""
Shared fixtures.

FakeCustomObjectsApi stands in for kubernetes.client.CustomObjectsApi and
keeps custom objects in memory, raising the same ApiExceptions the API
server would.
"""

import threading

import pytest
from kubernetes.client import ApiException

from subscription_controller.apirule_client import ApiRuleClient
from subscription_controller.config import ControllerConfig
from subscription_controller.handlers import TenantCallbackHandler
from subscription_controller.sync import ApiRuleSynchronizer

CLUSTER_DOMAIN = "c-1234.kyma.ondemand.com"
NAMESPACE = "tenants"


class FakeCustomObjectsApi:
    """In-memory namespaced custom objects."""

    def __init__(self):
        self.objects = {}
        self.calls = []
        self.failures = {}
        self._lock = threading.Lock()

    def fail(self, operation: str, exc: Exception) -> None:
        """Make the next ``operation`` call raise ``exc``."""
        self.failures[operation] = exc

    def calls_to(self, operation: str) -> list:
        return [kwargs for op, kwargs in self.calls if op == operation]

    def _record(self, operation: str, kwargs: dict) -> None:
        self.calls.append((operation, kwargs))
        exc = self.failures.pop(operation, None)
        if exc is not None:
            raise exc

    @staticmethod
    def _key(group, version, namespace, plural, name):
        return (group, version, namespace, plural, name)

    def get_namespaced_custom_object(self, group, version, namespace, plural, name, **kwargs):
        with self._lock:
            self._record("get", dict(kwargs, namespace=namespace, name=name, group=group, version=version, plural=plural))
            key = self._key(group, version, namespace, plural, name)
            if key not in self.objects:
                raise ApiException(status=404, reason="Not Found")
            return self.objects[key]

    def create_namespaced_custom_object(self, group, version, namespace, plural, body, **kwargs):
        with self._lock:
            self._record("create", dict(kwargs, namespace=namespace, body=body, group=group, version=version, plural=plural))
            key = self._key(group, version, namespace, plural, body["metadata"]["name"])
            if key in self.objects:
                raise ApiException(status=409, reason="Conflict")
            self.objects[key] = body
            return body

    def delete_namespaced_custom_object(self, group, version, namespace, plural, name, **kwargs):
        with self._lock:
            self._record("delete", dict(kwargs, namespace=namespace, name=name, group=group, version=version, plural=plural))
            key = self._key(group, version, namespace, plural, name)
            if key not in self.objects:
                raise ApiException(status=404, reason="Not Found")
            del self.objects[key]
            return {"kind": "Status", "status": "Success"}

    def names(self) -> list:
        return sorted(key[4] for key in self.objects)


@pytest.fixture
def config():
    return ControllerConfig(cluster_domain=CLUSTER_DOMAIN, namespace=NAMESPACE, api_timeout=5.0)


@pytest.fixture
def fake_api():
    return FakeCustomObjectsApi()


@pytest.fixture
def apirule_client(config, fake_api):
    return ApiRuleClient(namespace=config.namespace, timeout=config.api_timeout, api=fake_api)


@pytest.fixture
def synchronizer(config, apirule_client):
    return ApiRuleSynchronizer(config, apirule_client)


@pytest.fixture
def handler(config, synchronizer):
    return TenantCallbackHandler(config, synchronizer)
