"""Twitch EventSub subscription lifecycle manager for the Alveus Sanctuary streams."""

__version__ = "0.1.0"
