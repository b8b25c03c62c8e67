"""API route modules."""

from workforce_auth.api.routes import (
    audit_logs,
    auth,
    authorization,
    health,
    organizations,
    users,
)

__all__ = [
    "audit_logs",
    "auth",
    "authorization",
    "health",
    "organizations",
    "users",
]
