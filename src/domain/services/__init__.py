"""Domain services."""

from src.domain.services.catalog import CatalogService
from src.domain.services.role_resolver import ROLE_STORES, RoleResolver, destination_for
from src.domain.services.session_bootstrap import SessionBootstrap
from src.domain.services.staff import StaffService

__all__ = [
    "CatalogService",
    "ROLE_STORES",
    "RoleResolver",
    "SessionBootstrap",
    "StaffService",
    "destination_for",
]
