"""Runtime settings for the storefront core.

Values are read from ``STOREFRONT_*`` environment variables. The Protean
environment itself is still selected through ``PROTEAN_ENV``.
"""

import os
from dataclasses import dataclass

ENV_PREFIX = "STOREFRONT_"


def _env(name: str, default: str) -> str:
    return os.getenv(f"{ENV_PREFIX}{name}", default)


@dataclass(frozen=True)
class Settings:
    """Storefront configuration."""

    store_name: str = "LayzoMarket"
    currency: str = "INR"
    minor_unit_factor: int = 100
    payment_method_name: str = "Razorpay"
    theme_color: str = "#8B5CF6"
    confirmation_display_seconds: float = 5.0
    order_write_attempts: int = 3
    order_write_backoff_seconds: float = 1.0
    share_base_url: str = "https://layzomarket.example/wishlist"
    storage_path: str = ".storefront/storage.json"
    document_store_url: str = "sqlite:///.storefront/orders.db"

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from the environment, falling back to defaults."""
        defaults = cls()
        return cls(
            store_name=_env("STORE_NAME", defaults.store_name),
            currency=_env("CURRENCY", defaults.currency).upper(),
            minor_unit_factor=int(_env("MINOR_UNIT_FACTOR", str(defaults.minor_unit_factor))),
            payment_method_name=_env("PAYMENT_METHOD_NAME", defaults.payment_method_name),
            theme_color=_env("THEME_COLOR", defaults.theme_color),
            confirmation_display_seconds=float(
                _env("CONFIRMATION_DISPLAY_SECONDS", str(defaults.confirmation_display_seconds))
            ),
            order_write_attempts=int(_env("ORDER_WRITE_ATTEMPTS", str(defaults.order_write_attempts))),
            order_write_backoff_seconds=float(
                _env("ORDER_WRITE_BACKOFF_SECONDS", str(defaults.order_write_backoff_seconds))
            ),
            share_base_url=_env("SHARE_BASE_URL", defaults.share_base_url),
            storage_path=_env("STORAGE_PATH", defaults.storage_path),
            document_store_url=_env("DOCUMENT_STORE_URL", defaults.document_store_url),
        )
