"""
Business logic services for FishFish.
"""

from fishfish.services.admin_service import AdminService
from fishfish.services.entity_service import EntityService
from fishfish.services.token_manager import TokenManager

__all__ = [
    "AdminService",
    "EntityService",
    "TokenManager",
]
