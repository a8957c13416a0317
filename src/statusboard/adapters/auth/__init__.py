"""Auth adapters."""

from statusboard.adapters.auth.identity import HttpIdentityVerifier, IdentityProviderConfig
from statusboard.adapters.auth.postgres import PostgresMembershipRepository

__all__ = ["HttpIdentityVerifier", "IdentityProviderConfig", "PostgresMembershipRepository"]
