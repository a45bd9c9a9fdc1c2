"""Session and token lifecycle for the admin dashboard."""

from clinicdesk.auth.refresh import RefreshCoordinator, RefreshedTokens, TokenState
from clinicdesk.auth.token_store import AdminUser, SessionToken, TokenError, TokenStore

__all__ = [
    "AdminUser",
    "RefreshCoordinator",
    "RefreshedTokens",
    "SessionToken",
    "TokenError",
    "TokenState",
    "TokenStore",
]
