"""Bundled sessions and compliance packs."""
