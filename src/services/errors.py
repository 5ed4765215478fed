"""Custom exception classes for ledger operations.

The ledger computation itself is permissive and raises nothing for missing
inputs; these exceptions belong to the data-access and configuration layers.
"""


class LedgerError(Exception):
    """Base exception for ledger errors."""

    pass


class ResidentNotFoundError(LedgerError):
    """Requested resident does not exist."""

    def __init__(self, tenant_id: int):
        super().__init__(f"Tenant {tenant_id} not found")
        self.tenant_id = tenant_id


class ConfigError(LedgerError, ValueError):
    """Configuration loading or validation error."""

    pass


class OwnerNotFoundError(LedgerError):
    """Requested landlord or homeowner does not exist."""

    def __init__(self, owner_id: int):
        super().__init__(f"Owner {owner_id} not found")
        self.owner_id = owner_id
