"""Client-side core for the unheard path gateway's server-sent event streams."""

__version__ = "1.0.0"
