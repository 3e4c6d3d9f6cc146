"""Adapters that plug SMS sources, storage and notifiers into the core."""
