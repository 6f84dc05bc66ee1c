"""
ECK provider modules.
"""
from .client import ECKClient
from .provider import ECKProvider
from .wait import CancellationToken, ReconciliationWaiter, ResourceIdentifier

__all__ = [
    'ECKClient',
    'ECKProvider',
    'CancellationToken',
    'ReconciliationWaiter',
    'ResourceIdentifier',
]
