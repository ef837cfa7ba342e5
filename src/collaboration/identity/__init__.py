"""Identity and role registry."""

from collaboration.identity.registry import AuthorizationContext, bootstrap, promote

__all__ = ["AuthorizationContext", "bootstrap", "promote"]
