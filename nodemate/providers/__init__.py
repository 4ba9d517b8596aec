"""LLM provider adapters and the factory that builds them."""

from .base import BaseProvider
from .factory import ProviderFactory

__all__ = ["BaseProvider", "ProviderFactory"]
