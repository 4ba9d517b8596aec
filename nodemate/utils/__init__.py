"""Shared helpers: secrets, retries, logging and bounded subprocesses."""

from .sensitive_str import SensitiveStr, redact_mapping

__all__ = ["SensitiveStr", "redact_mapping"]
