"""Empirical 2D wind tunnel: silhouette in, drag, lift and vortex shedding out."""

__all__ = [
    "aero",
    "cli",
    "config",
    "errors",
    "geometry",
    "service",
    "storage",
]
