"""Sentiment and segmentation analysis of Airbnb review text."""

__version__ = "0.1.0"

from .config import settings

__all__ = ["settings"]
