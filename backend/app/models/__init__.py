# SNIC Models
from app.models.base import BaseModel
from app.models.policy import Policy
from app.models.product import Feature, Product
from app.models.token_blacklist import BlacklistedToken
from app.models.user import User, UserRole

__all__ = [
    "BaseModel",
    "BlacklistedToken",
    "Feature",
    "Policy",
    "Product",
    "User",
    "UserRole",
]
