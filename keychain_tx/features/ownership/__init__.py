"""Ownership feature module."""

from keychain_tx.features.ownership.service import OwnershipService

__all__ = ["OwnershipService"]
