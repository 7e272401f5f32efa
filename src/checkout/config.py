"""Environment-driven settings for the checkout context."""

import os

DEFAULT_ORDER_NUMBER_PREFIX = "RG"
DEFAULT_LOW_STOCK_THRESHOLD = 5
DEFAULT_CHECKOUT_CLAIM_TTL_SECONDS = 300


def get_environment() -> str:
    """Name of the running environment, lower-cased."""
    return (os.getenv("PROTEAN_ENV") or os.getenv("ENVIRONMENT") or "development").lower()


def get_order_number_prefix() -> str:
    return os.getenv("ORDER_NUMBER_PREFIX", DEFAULT_ORDER_NUMBER_PREFIX)


def get_low_stock_threshold() -> int:
    """Stock level at or below which an active product counts as low."""
    raw = os.getenv("LOW_STOCK_THRESHOLD")
    if raw is None or raw == "":
        return DEFAULT_LOW_STOCK_THRESHOLD
    try:
        threshold = int(raw)
    except ValueError:
        raise ValueError(f"LOW_STOCK_THRESHOLD must be an integer, got {raw!r}") from None
    if threshold < 0:
        raise ValueError(f"LOW_STOCK_THRESHOLD must not be negative, got {threshold}")
    return threshold


def get_checkout_claim_ttl() -> int:
    """Seconds after which an unfinished checkout's hold on a cart lapses."""
    raw = os.getenv("CHECKOUT_CLAIM_TTL_SECONDS")
    if raw is None or raw == "":
        return DEFAULT_CHECKOUT_CLAIM_TTL_SECONDS
    try:
        ttl = int(raw)
    except ValueError:
        raise ValueError(f"CHECKOUT_CLAIM_TTL_SECONDS must be an integer, got {raw!r}") from None
    if ttl < 1:
        raise ValueError(f"CHECKOUT_CLAIM_TTL_SECONDS must be positive, got {ttl}")
    return ttl


def get_store_adapter() -> str:
    """Which catalog/cart store adapter to wire by default."""
    return os.getenv("CHECKOUT_STORE_ADAPTER", "protean")
