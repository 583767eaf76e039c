"""Dependency injection module.

Providers are listed once in ``PROVIDERS``. Mockable components (OAuth,
persistence) are abstract bases whose subclasses are told apart by
``__is_mock__``; tests swap them in by component name.
"""

from typing import AbstractSet, Type

from loginlab.config import Settings
from loginlab.util.di.application import ProdApplicationProvider
from loginlab.util.di.base import Component, ProviderBase
from loginlab.util.di.core import ProdConfigProvider
from loginlab.util.di.domain import ProdDomainProvider
from loginlab.util.di.infrastructure import (
    OAuthProvider,
    PersistenceProvider,
    ProdOAuthProvider,
    ProdPersistenceProvider,
)
from loginlab.util.error import DependencyInjectionError

PROVIDERS: list[Type[ProviderBase]] = [
    ProdConfigProvider,
    ProdDomainProvider,
    ProdApplicationProvider,
    OAuthProvider,
    PersistenceProvider,
]


def mockable_components() -> set[Component]:
    """Components that currently have a registered implementation pair."""
    return {
        base.__mock_component__
        for base in PROVIDERS
        if base.__mock_component__ and base.__subclasses__()
    }


def get_provider(
    base: Type[ProviderBase], use_mock: bool = False
) -> Type[ProviderBase]:
    """Pick the provider class to instantiate for ``base``.

    A base without subclasses is concrete and returned as-is. Otherwise the
    subclass whose ``__is_mock__`` equals ``use_mock`` is returned.

    Raises:
        DependencyInjectionError: If no matching implementation is registered
    """
    subclasses = base.__subclasses__()
    if not subclasses:
        return base

    for candidate in subclasses:
        if candidate.__is_mock__ == use_mock:
            return candidate

    kind = "mock" if use_mock else "production"
    raise DependencyInjectionError(
        f"No {kind} implementation for {base.__mock_component__ or base.__name__}"
    )


def build_providers(
    settings: Settings | None = None,
    mocked: AbstractSet[Component] = frozenset(),
) -> list[ProviderBase]:
    """Instantiate every provider in ``PROVIDERS``.

    Args:
        settings: Settings handed to the config provider; loaded from the
            environment when omitted
        mocked: Components to build from their mock implementation
    """
    instances: list[ProviderBase] = []
    for base in PROVIDERS:
        if base is ProdConfigProvider:
            instances.append(ProdConfigProvider(settings))
            continue
        use_mock = base.__mock_component__ in mocked
        instances.append(get_provider(base, use_mock=use_mock)())
    return instances


__all__ = [
    "Component",
    "ProviderBase",
    "PROVIDERS",
    "build_providers",
    "get_provider",
    "mockable_components",
    "ProdConfigProvider",
    "ProdDomainProvider",
    "ProdApplicationProvider",
    "OAuthProvider",
    "PersistenceProvider",
    "ProdOAuthProvider",
    "ProdPersistenceProvider",
]
