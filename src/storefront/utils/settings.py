"""Access to storefront settings declared under ``[custom]`` in domain.toml."""

from protean.utils.globals import current_domain

_DEFAULTS = {
    "CURRENCY": "usd",
    "LOYALTY_POINTS_PER_ORDER": 5,
    "LOYALTY_REDEMPTION_POINTS": 5,
    "LOYALTY_REDEMPTION_VALUE": 5.0,
    "PRICE_TOLERANCE": 0.01,
    "GATEWAY_TIMEOUT_SECONDS": 10,
    "MAX_CONCURRENCY_RETRIES": 3,
    "NOTIFICATION_SENDER": "orders@storefront.local",
}


def setting(name: str):
    """Return a custom setting from the active domain, falling back to the default."""
    custom = current_domain.config.get("custom") or {}
    return custom.get(name, _DEFAULTS[name])
