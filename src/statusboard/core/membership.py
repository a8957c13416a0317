"""Last-admin invariant guard.

Every organization must keep at least one admin membership after every
mutation. The guard is a pure decision over the organization's current admin
set; storage implementations call it while holding a lock on that set and
perform the write before releasing it.
"""

from __future__ import annotations

import logging
from collections.abc import Collection
from enum import Enum
from uuid import UUID

from statusboard.core.auth.types import OrgRole
from statusboard.core.exceptions import ValidationCode, ValidationError

logger = logging.getLogger(__name__)


class Removal(Enum):
    """Marker for a membership removal in place of a proposed role."""

    REMOVAL = "removal"


REMOVAL = Removal.REMOVAL


class MembershipInvariantGuard:
    """Validates demotions and removals against the last-admin invariant."""

    @staticmethod
    def applies(current_role: OrgRole, proposed: OrgRole | Removal) -> bool:
        """Whether a mutation can reduce the admin count."""
        if current_role != OrgRole.ADMIN:
            return False
        return proposed is REMOVAL or proposed != OrgRole.ADMIN

    def check_mutation(
        self,
        org_id: UUID,
        target_user_id: UUID,
        current_role: OrgRole,
        proposed: OrgRole | Removal,
        admin_user_ids: Collection[UUID],
    ) -> None:
        """Check a proposed mutation.

        Args:
            org_id: Organization being mutated.
            target_user_id: Member whose role changes or who is removed.
            current_role: The target's role before the mutation.
            proposed: New role, or REMOVAL.
            admin_user_ids: All admins of the organization, read under lock.

        Raises:
            ValidationError: LAST_ADMIN if the target is the sole admin.
        """
        if not self.applies(current_role, proposed):
            return

        if len(admin_user_ids) == 1 and target_user_id in admin_user_ids:
            logger.info(f"last_admin_mutation_denied: org_id={org_id}, user_id={target_user_id}")
            if proposed is REMOVAL:
                message = (
                    "Cannot remove the last admin. Organization must have at least one admin."
                )
            else:
                message = (
                    "Cannot change role of the last admin. "
                    "Organization must have at least one admin."
                )
            raise ValidationError(ValidationCode.LAST_ADMIN, message)
