# SNIC API Services
from app.services.auth import AuthService
from app.services.policy import PolicyService
from app.services.product import ProductService
from app.services.token_blacklist import TokenBlacklistService
from app.services.token_cleanup import TokenCleanupService
from app.services.tokens import TokenConfig, TokenIssuer

__all__ = [
    "AuthService",
    "PolicyService",
    "ProductService",
    "TokenBlacklistService",
    "TokenCleanupService",
    "TokenConfig",
    "TokenIssuer",
]
