"""KRM objects and resource lists, metadata and error helpers, a mockable API
client, a Go-style template engine, and KRM functions that generate ConfigMaps
and Kustomizations."""

__version__ = "0.1.0"

__all__ = ["__version__"]