"""
Subscription Controller

Tenant subscription callbacks that provision one APIRule per tenant.
"""

from .config import ControllerConfig
from .main import create_app

__version__ = "0.1.0"
__all__ = ["ControllerConfig", "create_app"]
