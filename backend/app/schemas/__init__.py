# SNIC Pydantic Schemas
from app.schemas.auth import (
    AuthResponse,
    LoginRequest,
    MessageResponse,
    ProtectedDataResponse,
    RegisterRequest,
    TokenStatusResponse,
    UserResponse,
)
from app.schemas.policy import PolicyCreate, PolicyResponse, PolicyUpdate
from app.schemas.product import (
    FeatureCreate,
    FeatureResponse,
    ProductCreate,
    ProductResponse,
    ProductUpdate,
)

__all__ = [
    "AuthResponse",
    "FeatureCreate",
    "FeatureResponse",
    "LoginRequest",
    "MessageResponse",
    "PolicyCreate",
    "PolicyResponse",
    "PolicyUpdate",
    "ProductCreate",
    "ProductResponse",
    "ProductUpdate",
    "ProtectedDataResponse",
    "RegisterRequest",
    "TokenStatusResponse",
    "UserResponse",
]
