"""
core/policy.py
--------------
Declarative access policies.

Every protected operation names a Policy in POLICIES: the roles allowed to
call it and, optionally, a tenant-scope predicate that non-admin callers
must also satisfy. authorize() is the single place these are evaluated.
"""

from dataclasses import dataclass
from typing import Callable, Dict, FrozenSet, Optional

from auth_service.core.errors import AuthorizationError
from auth_service.models.user import Role


@dataclass(frozen=True)
class Identity:
    """Who the verified access token says the caller is."""
    user_id: int
    role: Role


# (identity, caller's tenant id, tenant id of the target resource) -> allowed
TenantScope = Callable[[Identity, Optional[int], Optional[int]], bool]


def same_tenant(
    identity: Identity, caller_tenant_id: Optional[int], target_tenant_id: Optional[int]
) -> bool:
    return caller_tenant_id is not None and caller_tenant_id == target_tenant_id


@dataclass(frozen=True)
class Policy:
    roles: FrozenSet[Role]
    tenant_scope: Optional[TenantScope] = None


ADMIN_ONLY = Policy(roles=frozenset({Role.admin}))
ANY_ROLE = Policy(roles=frozenset(Role))

POLICIES: Dict[str, Policy] = {
    "auth:self": ANY_ROLE,
    "auth:logout": ANY_ROLE,
    "users:create": ADMIN_ONLY,
    "users:update": ADMIN_ONLY,
    "users:list": ADMIN_ONLY,
    "users:read": ADMIN_ONLY,
    "users:delete": ADMIN_ONLY,
    "tenants:create": ADMIN_ONLY,
    "tenants:update": ADMIN_ONLY,
    "tenants:delete": ADMIN_ONLY,
    "tenants:read": Policy(
        roles=frozenset({Role.admin, Role.manager}),
        tenant_scope=same_tenant,
    ),
}


def authorize(
    policy: Policy,
    identity: Identity,
    *,
    caller_tenant_id: Optional[int] = None,
    target_tenant_id: Optional[int] = None,
) -> None:
    """
    Raise AuthorizationError unless `identity` satisfies `policy`.
    Admins are never tenant-scoped.
    """
    if identity.role not in policy.roles:
        raise AuthorizationError()
    if policy.tenant_scope is None or identity.role == Role.admin:
        return
    if not policy.tenant_scope(identity, caller_tenant_id, target_tenant_id):
        raise AuthorizationError("You can only access resources within your own tenant")
