"""
Provider Registry - Central registry for provider adapters.

This module manages:
- Registration of adapter implementations
- Case-insensitive adapter lookup by provider name
- Provider configuration loading/saving and API key lookup
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path

from genflow.errors import UnknownProvider
from genflow.providers.base import ProviderAdapter, ProviderConfig


logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path.home() / ".config" / "genflow" / "providers.json"


class ProviderRegistry:
    """
    Central registry for provider adapters.

    Handles:
    - Adapter registration
    - Adapter instantiation with per-provider configuration
    - Configuration management and credential lookup
    """

    _instance: ProviderRegistry | None = None

    def __new__(cls) -> ProviderRegistry:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._init()
        return cls._instance

    @classmethod
    def instance(cls) -> ProviderRegistry:
        return cls()

    def _init(self) -> None:
        """Initialize the registry."""
        self._providers: dict[str, type[ProviderAdapter]] = {}
        self._provider_instances: dict[str, ProviderAdapter] = {}
        self._configs: dict[str, ProviderConfig] = {}
        self._config_path: Path | None = None

    # -------------------------------------------------------------------------
    # Provider Registration
    # -------------------------------------------------------------------------

    def register_provider(self, provider_class: type[ProviderAdapter]) -> None:
        """Register an adapter implementation."""
        self._providers[provider_class.id] = provider_class

    def get_adapter(self, provider: str) -> ProviderAdapter:
        """
        Get an instantiated adapter.

        Provider names are matched case-insensitively, so the upper-case
        names stored in workflow documents resolve to the registered ids.

        Raises:
            UnknownProvider: No adapter registered under that name
        """
        provider_id = provider.strip().lower()
        if provider_id in self._provider_instances:
            return self._provider_instances[provider_id]

        if provider_id not in self._providers:
            raise UnknownProvider(provider)

        adapter = self._providers[provider_id](self.get_config(provider_id))
        self._provider_instances[provider_id] = adapter
        return adapter

    def has_provider(self, provider: str) -> bool:
        return provider.strip().lower() in self._providers

    def list_providers(self) -> list[str]:
        """Get list of registered provider IDs."""
        return list(self._providers.keys())

    def list_configured_providers(self) -> list[str]:
        """Get list of providers with an API key available."""
        return [pid for pid in self._providers if self.get_api_key(pid)]

    # -------------------------------------------------------------------------
    # Configuration
    # -------------------------------------------------------------------------

    def set_config(self, provider_id: str, config: ProviderConfig) -> None:
        """Set configuration for a provider."""
        provider_id = provider_id.lower()
        self._configs[provider_id] = config
        # Invalidate cached instance
        self._provider_instances.pop(provider_id, None)

    def get_config(self, provider_id: str) -> ProviderConfig:
        """Get configuration for a provider."""
        return self._configs.get(provider_id.lower(), ProviderConfig())

    def get_api_key(self, provider: str) -> str | None:
        """
        Look up the API key for a provider.

        The adapter's environment variable wins over the stored key.
        Disabled providers have no key.
        """
        provider_id = provider.strip().lower()
        config = self.get_config(provider_id)
        if not config.enabled:
            return None

        provider_class = self._providers.get(provider_id)
        if provider_class is not None and provider_class.api_key_env:
            env_key = os.environ.get(provider_class.api_key_env)
            if env_key:
                return env_key

        return config.api_key or None

    def load_config(self, path: Path | None = None) -> None:
        """Load provider configurations from file."""
        if path is None:
            path = DEFAULT_CONFIG_PATH

        self._config_path = path

        if not path.exists():
            return

        try:
            with open(path) as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Failed to load provider config {path}: {e}")
            return

        for provider_id, cfg_data in data.get("providers", {}).items():
            self.set_config(provider_id, ProviderConfig(
                api_key=cfg_data.get("api_key", ""),
                enabled=cfg_data.get("enabled", True),
                base_url=cfg_data.get("base_url"),
                extra=cfg_data.get("extra", {}),
            ))

        logger.debug(f"Loaded provider config from {path}")

    def save_config(self, path: Path | None = None) -> Path:
        """Save provider configurations to file."""
        if path is None:
            path = self._config_path or DEFAULT_CONFIG_PATH

        # Ensure directory exists
        path.parent.mkdir(parents=True, exist_ok=True)

        data = {
            "providers": {
                pid: {
                    "api_key": cfg.api_key,
                    "enabled": cfg.enabled,
                    "base_url": cfg.base_url,
                    "extra": cfg.extra,
                }
                for pid, cfg in self._configs.items()
            },
        }

        with open(path, "w") as f:
            json.dump(data, f, indent=2)

        return path

    def clear_configs(self) -> None:
        """Forget all configuration (primarily for testing)."""
        self._configs.clear()
        self._provider_instances.clear()
        self._config_path = None


# ============================================================================
# Module-level convenience functions
# ============================================================================

def get_registry() -> ProviderRegistry:
    """Get the global provider registry."""
    return ProviderRegistry.instance()
