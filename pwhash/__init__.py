from __future__ import annotations

from .hasher import HashRequest, HashResult, PasswordHasher, Stage, build, plan
from .kdf import ConfigurationError, HasherConfig, HasherError

__all__ = [
    "build",
    "plan",
    "PasswordHasher",
    "HashRequest",
    "HashResult",
    "Stage",
    "HasherConfig",
    "HasherError",
    "ConfigurationError",
]
