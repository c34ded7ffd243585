"""Device credential lookup."""

from deviceservice.credentials.resolver import USERNAME_PASSWORD, Credential, CredentialResolver

__all__ = ["Credential", "CredentialResolver", "USERNAME_PASSWORD"]
