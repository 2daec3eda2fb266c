"""Audit trail package."""

from mindlens.infrastructure.audit.client import AuditReceipt, AuditTrail
from mindlens.infrastructure.audit.memory_client import InMemoryAuditTrail

__all__ = ["AuditReceipt", "AuditTrail", "InMemoryAuditTrail"]
