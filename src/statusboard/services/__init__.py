"""Application services."""

from statusboard.services.organization import OrganizationService, generate_slug
from statusboard.services.status import PublicStatusService, ServiceDetail, overall_status

__all__ = [
    "OrganizationService",
    "generate_slug",
    "PublicStatusService",
    "ServiceDetail",
    "overall_status",
]
