"""Base class for domain services."""


class Service:
    """Marker base for stateless services that work through repositories and ports."""
