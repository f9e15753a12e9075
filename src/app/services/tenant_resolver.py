"""
Tenant resolution

Maps the identifier a user types at login ("acme" or "alice@acme") onto an
isolated tenant. Every user lookup afterwards is scoped by the tenant id.
"""

from libs.result import Error, Result, Return
from src.app.repositories.tenant_repository import ITenantRepository
from src.domain.entities import Tenant


def domain_from_identifier(identifier: str) -> str:
    """Domain part after the last '@', or the identifier itself"""
    identifier = (identifier or "").strip().lower()
    return identifier.rsplit("@", 1)[-1]


class TenantResolver:
    def __init__(self, tenants: ITenantRepository):
        self.tenants = tenants

    async def resolve(self, identifier: str) -> Result[Tenant]:
        """
        Resolve an identifier to an active tenant.

        Errors:
            - TENANT_NOT_FOUND: No tenant owns the domain
            - TENANT_INACTIVE: Tenant exists but is disabled
        """
        domain = domain_from_identifier(identifier)
        tenant = await self.tenants.get_by_domain(domain) if domain else None
        if tenant is None:
            return Return.err(Error("TENANT_NOT_FOUND", "Tenant not found"))
        if not tenant.is_active:
            return Return.err(Error("TENANT_INACTIVE", "Tenant is not active"))
        return Return.ok(tenant)
