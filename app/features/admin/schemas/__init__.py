from .auth import (
    AdminAuthResponse,
    AdminLoginRequest,
    AdminRegistrationRequest,
    AdminResponse,
    AdminSummary,
)

__all__ = [
    "AdminAuthResponse",
    "AdminLoginRequest",
    "AdminRegistrationRequest",
    "AdminResponse",
    "AdminSummary",
]
