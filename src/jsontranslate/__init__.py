"""Translate JSON message catalogues with a translation provider, keeping their keys."""

__version__ = "0.1.0"
