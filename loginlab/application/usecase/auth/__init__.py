"""Authentication use cases."""

from .handle_callback import HandleCallbackUseCase

__all__ = ["HandleCallbackUseCase"]
