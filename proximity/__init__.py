"""Proximity: location-based posts, channels and friends API."""

__all__ = []
