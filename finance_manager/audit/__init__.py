"""Audit logging package."""

from finance_manager.audit.logger import AuditLogger

__all__ = ["AuditLogger"]
