"""
Integrations Module

Encrypted storage of third-party credentials, including the managed
AI Gateway keys this service provisions on a user's behalf.
"""

from .codec import DecodeFailure, ManagedKeyConfig, SecureConfigCodec
from .crud_integration import PersistenceError, integration

__all__ = [
    "DecodeFailure",
    "ManagedKeyConfig",
    "SecureConfigCodec",
    "PersistenceError",
    "integration",
]
