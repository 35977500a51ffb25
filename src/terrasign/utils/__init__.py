"""Utility modules for terrasign."""

from terrasign.utils.secrets import SecretBytes

__all__ = ["SecretBytes"]
