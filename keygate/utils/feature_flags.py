"""
Feature flags for gating capabilities per deployment.

Flags come from code defaults and can be overridden per process with
``FEATURE_FLAG_<NAME>=true/false`` environment variables.

Usage:
    from keygate.utils.feature_flags import is_enabled

    if is_enabled("ai_gateway_managed_keys"):
        ...

Flags are read once when a consumer is constructed; callers that need a
stable value for their lifetime (the consent service) take the resolved
boolean rather than the registry.
"""

import logging
import os
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

from keygate.config import settings

logger = logging.getLogger(__name__)

AI_GATEWAY_MANAGED_KEYS = "ai_gateway_managed_keys"


class RolloutStrategy(Enum):
    """Feature rollout strategies."""

    ALL = "all"  # Enabled for everyone
    NONE = "none"  # Disabled for everyone


@dataclass
class FeatureFlag:
    """Configuration for a single feature flag."""

    name: str
    description: str = ""
    enabled: bool = False
    strategy: RolloutStrategy = RolloutStrategy.ALL


def _default_flags() -> Dict[str, FeatureFlag]:
    return {
        AI_GATEWAY_MANAGED_KEYS: FeatureFlag(
            name=AI_GATEWAY_MANAGED_KEYS,
            description="Provision AI Gateway API keys on the user's Vercel team",
            enabled=settings.AI_GATEWAY_MANAGED_KEYS_ENABLED,
            strategy=RolloutStrategy.ALL,
        ),
        "request_id_tracing": FeatureFlag(
            name="request_id_tracing",
            description="Tag requests and log lines with a request ID",
            enabled=True,
            strategy=RolloutStrategy.ALL,
        ),
    }


class FeatureFlags:
    """
    Feature flags manager.

    Flags can be configured via:
    1. Code defaults (settings-backed where a setting exists)
    2. Environment variables (FEATURE_FLAG_<NAME>=true/false)
    3. Runtime updates via set_flag
    """

    _flags: Dict[str, FeatureFlag] = {}
    _initialized: bool = False

    @classmethod
    def initialize(cls) -> None:
        """Initialize feature flags from defaults and environment."""
        if cls._initialized:
            return

        cls._flags = _default_flags()

        for name, flag in cls._flags.items():
            env_key = f"FEATURE_FLAG_{name.upper()}"
            env_value = os.environ.get(env_key)

            if env_value is not None:
                flag.enabled = env_value.lower() in ("true", "1", "yes", "on")
                logger.debug(
                    f"Feature flag '{name}' set to {flag.enabled} from environment"
                )

        cls._initialized = True
        logger.info(f"Initialized {len(cls._flags)} feature flags")

    @classmethod
    def get_flag(cls, name: str) -> Optional[FeatureFlag]:
        cls.initialize()
        return cls._flags.get(name)

    @classmethod
    def is_enabled(cls, name: str) -> bool:
        """
        Check if a feature flag is enabled.

        Unknown flags are reported and treated as disabled.
        """
        flag = cls.get_flag(name)

        if flag is None:
            logger.warning(f"Unknown feature flag: {name}")
            return False

        if not flag.enabled:
            return False

        return flag.strategy != RolloutStrategy.NONE

    @classmethod
    def set_flag(
        cls,
        name: str,
        enabled: bool,
        strategy: Optional[RolloutStrategy] = None,
    ) -> None:
        """Update (or create) a feature flag at runtime."""
        cls.initialize()

        if name not in cls._flags:
            cls._flags[name] = FeatureFlag(name=name, enabled=enabled)

        flag = cls._flags[name]
        flag.enabled = enabled
        if strategy is not None:
            flag.strategy = strategy

        logger.info(f"Feature flag '{name}' updated: enabled={enabled}")

    @classmethod
    def get_all_flags(cls) -> Dict[str, Dict[str, Any]]:
        cls.initialize()
        return {
            name: {
                "name": flag.name,
                "description": flag.description,
                "enabled": flag.enabled,
                "strategy": flag.strategy.value,
            }
            for name, flag in cls._flags.items()
        }

    @classmethod
    def reset(cls) -> None:
        """Reset feature flags to defaults (useful for testing)."""
        cls._flags = {}
        cls._initialized = False
        cls.initialize()


def is_enabled(name: str) -> bool:
    """Check if a feature flag is enabled."""
    return FeatureFlags.is_enabled(name)
