from django.apps import apps
from django.conf import settings

from clients.services.registry import ClientRegistry
from grants.services.orchestrator import GrantService
from interactions.services.engine import InteractionService
from tokens.services.engine import TokenService
from tokens.signing import SigningKey


class ServiceContainer:
    """
    Builds and owns the services, and the one signing key they share, for
    the life of the process.
    """

    def __init__(
        self,
        issuer: str,
        token_lifetime: int,
        interaction_timeout: int,
        signing_key: SigningKey | None = None,
    ):
        self.signing_key = signing_key or SigningKey.generate()
        self.clients = ClientRegistry()
        self.interactions = InteractionService(
            issuer=issuer,
            interaction_timeout=interaction_timeout,
        )
        self.tokens = TokenService(
            signing_key=self.signing_key,
            issuer=issuer,
            token_lifetime=token_lifetime,
        )
        self.grants = GrantService(
            clients=self.clients,
            interactions=self.interactions,
            tokens=self.tokens,
            issuer=issuer,
            token_lifetime=token_lifetime,
        )

    @classmethod
    def from_settings(cls) -> "ServiceContainer":
        return cls(
            issuer=settings.GNAP_ISSUER,
            token_lifetime=settings.GNAP_TOKEN_LIFETIME,
            interaction_timeout=settings.GNAP_INTERACTION_TIMEOUT,
        )

    def sweeps(self) -> dict:
        """
        The periodic cleanups, by name, for the sweep runner.
        """
        return {
            "grants": self.grants.cleanup_expired_grants,
            "tokens": self.tokens.cleanup_expired_tokens,
            "interactions": self.interactions.cleanup_expired_interactions,
        }


def get_container() -> ServiceContainer:
    return apps.get_app_config("core").services
