"""
Adapters package - External service connections.
HTTP clients for maps, identity provider keys, SMS, payment processors and GitHub issues.
"""

from adapters import maps_adapter, identity_adapter, sms_adapter, payments_adapter, github_adapter

__all__ = [
    "maps_adapter",
    "identity_adapter",
    "sms_adapter",
    "payments_adapter",
    "github_adapter",
]
