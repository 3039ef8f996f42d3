# letterbox ports (Protocol interfaces)
# Abstract interfaces for adapters; no implementations here

from letterbox.core.ports.db import (
    OperatorCredentialStorePort,
    RecordNotFoundError,
    StoreConnectivityError,
    StoreConstraintError,
    StoreError,
    SubscriptionStorePort,
)
from letterbox.core.ports.email import (
    EmailConfigError,
    EmailError,
    EmailPort,
    EmailResult,
    EmailStatus,
)

__all__ = [
    # Store
    "OperatorCredentialStorePort",
    "RecordNotFoundError",
    "StoreConnectivityError",
    "StoreConstraintError",
    "StoreError",
    "SubscriptionStorePort",
    # Email
    "EmailConfigError",
    "EmailError",
    "EmailPort",
    "EmailResult",
    "EmailStatus",
]
