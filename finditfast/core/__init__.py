"""Core search engine for finditfast.

Note: Imports are lazy so that importing a single submodule (for example
``finditfast.core.geodesic``) does not load settings or the engine.
"""

__all__ = [
    "Coordinates",
    "Item",
    "SearchEngine",
    "SearchResult",
    "SearchUnavailable",
    "Settings",
    "StoreRecord",
    "StoreRef",
    "StoreStatus",
    "UpstreamQueryFailure",
    "distance_km",
    "settings",
]


def __getattr__(name):
    """Lazy import to avoid circular dependencies."""
    if name in ("Coordinates", "Item", "SearchResult", "StoreRecord", "StoreRef", "StoreStatus"):
        from finditfast.core import models
        return getattr(models, name)
    elif name in ("SearchEngine", "SearchUnavailable"):
        from finditfast.core import search_engine
        return getattr(search_engine, name)
    elif name in ("Settings", "settings"):
        from finditfast.core import config
        return getattr(config, name)
    elif name == "UpstreamQueryFailure":
        from finditfast.core.collaborators import UpstreamQueryFailure
        return UpstreamQueryFailure
    elif name == "distance_km":
        from finditfast.core.geodesic import distance_km
        return distance_km
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
