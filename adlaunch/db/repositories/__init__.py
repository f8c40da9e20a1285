from adlaunch.db.repositories.connections import ConnectionsRepository
from adlaunch.db.repositories.oauth_states import OAuthStatesRepository, PendingOAuthState

__all__ = ["ConnectionsRepository", "OAuthStatesRepository", "PendingOAuthState"]
