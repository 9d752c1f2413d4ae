"""
APIRule templates.

Pure helpers that derive tenant hosts, URLs and the APIRule body exposing a
tenant host through the cluster gateway. Both the create and the delete path
take the resource name from here.
"""

API_RULE_GROUP = "gateway.kyma-project.io"
API_RULE_VERSION = "v1alpha1"
API_RULE_PLURAL = "apirules"
API_RULE_KIND = "APIRule"

ALLOWED_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "HEAD"]
MANAGED_BY = "subscription-controller"


def tenant_host(subdomain: str, suffix: str) -> str:
    """Host label exposed for a tenant, e.g. ``acme-approuter``."""
    return f"{subdomain}-{suffix}"


def tenant_url(subdomain: str, suffix: str, cluster_domain: str) -> str:
    """Public access URL returned to the subscription caller."""
    return f"https://{tenant_host(subdomain, suffix)}.{cluster_domain}"


def api_rule_name(host: str) -> str:
    """Generate the APIRule name for a tenant host."""
    return f"{host}-resource"


def build_api_rule(
    service_name: str,
    service_port: int,
    host: str,
    cluster_domain: str,
    namespace: str,
    gateway: str,
) -> dict:
    """
    Build the APIRule exposing ``host`` on the gateway.

    All methods in ALLOWED_METHODS are let through under the ``allow`` access
    strategy; no authentication is enforced at the gateway.
    """
    return {
        "apiVersion": f"{API_RULE_GROUP}/{API_RULE_VERSION}",
        "kind": API_RULE_KIND,
        "metadata": {
            "name": api_rule_name(host),
            "namespace": namespace,
            "labels": {
                "app.kubernetes.io/managed-by": MANAGED_BY,
                "subscription-controller/host": host,
            },
            "annotations": {
                "subscription-controller/url": f"https://{host}.{cluster_domain}",
            },
        },
        "spec": {
            "gateway": gateway,
            "service": {
                "host": host,
                "name": service_name,
                "port": service_port,
            },
            "rules": [
                {
                    "path": "/.*",
                    "methods": list(ALLOWED_METHODS),
                    "accessStrategies": [
                        {"handler": "allow"},
                    ],
                }
            ],
        },
    }
