"""Admission control for a channel-aware Nostr relay."""

__version__ = "0.1.0"
