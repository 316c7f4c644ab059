"""Search terms in, tweet texts out."""

__version__ = "0.1.0"
