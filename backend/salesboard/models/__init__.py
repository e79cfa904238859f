"""ORM model exports for convenient imports elsewhere in the app."""

from salesboard.models.base import Base
from salesboard.models.account import Account, AccountRevenue
from salesboard.models.audit_log import AuditLog
from salesboard.models.chat import SellerChatMessage
from salesboard.models.health_threshold import HealthThreshold
from salesboard.models.manager import Manager
from salesboard.models.profile import Profile
from salesboard.models.relationship import OriginalRelationship, RelationshipMap
from salesboard.models.request import ApprovalRequest
from salesboard.models.seller import Seller

__all__ = [
    "Base",
    "Account",
    "AccountRevenue",
    "ApprovalRequest",
    "AuditLog",
    "HealthThreshold",
    "Manager",
    "OriginalRelationship",
    "Profile",
    "RelationshipMap",
    "Seller",
    "SellerChatMessage",
]
