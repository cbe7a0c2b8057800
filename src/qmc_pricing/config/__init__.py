"""Frozen configuration and tolerance constants."""
