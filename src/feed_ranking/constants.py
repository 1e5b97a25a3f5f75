"""Shared constants across the application."""

# Default increment per facet when a bump does not name its own weight
FACET_BUMP_DEFAULTS = {
    "cat": 1.0,
    "store": 1.0,
    "gender": 0.4,
    "size": 0.3,
    "price": 0.5,
    "eta": 0.5,
    "product": 1.2,
}

# Facet increments per tracked interaction
INTERACTION_BUMPS = {
    "product_open": {
        "cat": 1.2,
        "store": 1.0,
        "gender": 0.6,
        "price": 0.6,
        "eta": 0.4,
        "product": 1.2,
    },
    "filter_category": {"cat": 0.5},
    "filter_store": {"store": 0.5},
    "filter_gender": {"gender": 0.4},
    "filter_size": {"size": 0.3},
}

# Price tiers (upper bound exclusive, label); anything above the last bound is "luxury"
PRICE_TIERS = [
    (100.0, "budget"),
    (300.0, "mid"),
    (800.0, "premium"),
]
PRICE_TOP_TIER = "luxury"

# Delivery-time tiers in minutes (upper bound inclusive, label)
ETA_TIERS = [
    (30, "express"),
    (60, "hour"),
    (180, "same_afternoon"),
    (24 * 60, "same_day"),
]
ETA_TOP_TIER = "scheduled"

# Persisted document layout
PREFERENCES_VERSION = 2
SECONDS_PER_DAY = 86400.0

# Exploration injects into alternating head slots starting here
EXPLORATION_FIRST_SLOT = 1
