"""Core DI providers (non-mockable)."""

from dishka import Scope, provide

from loginlab.config import AuthSettings, Settings, build_provider_registry
from loginlab.domain.value import ProviderRegistry
from loginlab.util.di.base import ProviderBase


class ProdConfigProvider(ProviderBase):
    """Production config provider - concrete, no mocks needed.

    Settings are loaded from environment variables and .env file unless an
    instance is passed in.
    """

    def __init__(self, settings: Settings | None = None) -> None:
        super().__init__()
        self._settings = settings

    @provide(scope=Scope.APP)
    def provide_settings(self) -> Settings:
        """Provide application settings."""
        return self._settings or Settings()

    @provide(scope=Scope.APP)
    def provide_auth_settings(self, settings: Settings) -> AuthSettings:
        """Provide auth settings."""
        return settings.auth

    @provide(scope=Scope.APP)
    def provide_provider_registry(self, settings: Settings) -> ProviderRegistry:
        """Provide the immutable set of configured OAuth providers."""
        return build_provider_registry(settings)
