"""
models/__init__.py
------------------
Re-export all models so create_tables.py (and the test fixtures) can import
Base and discover all tables via a single import:

    from auth_service.models import Base
"""

from auth_service.db.base import Base
from auth_service.models.refresh_token import RefreshToken
from auth_service.models.tenant import Tenant
from auth_service.models.user import Role, User

__all__ = ["Base", "RefreshToken", "Role", "Tenant", "User"]
