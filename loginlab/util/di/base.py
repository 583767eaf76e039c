"""Base classes for dependency injection providers."""

from typing import ClassVar, Literal

from dishka import Provider

# Components with a production and a mock provider
Component = Literal["oauth", "persistence"]


class ProviderBase(Provider):
    """Provider with the metadata ``build_providers`` selects on.

    A mockable component declares ``__mock_component__`` on its abstract
    base; each subclass sets ``__is_mock__``.
    """

    __mock_component__: ClassVar[Component | None] = None
    __is_mock__: ClassVar[bool] = False
