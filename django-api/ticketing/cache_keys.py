"""Cache key builders shared by handlers and signal receivers."""


def tiers_cache_key(event_id: str) -> str:
    return f"events:{event_id}:tiers"
