"""Infrastructure layer errors."""

from loginlab.domain.service.auth_service import OAuthClientError


class AdapterError(Exception):
    """Base infrastructure error."""

    pass


class OAuthAdapterError(AdapterError, OAuthClientError):
    """OAuth provider call failed.

    ``status_code`` is None for transport errors (timeouts, DNS, refused
    connections) where no response was received.
    """

    pass
