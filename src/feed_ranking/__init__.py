"""Client-side implicit-feedback ranking engine for product feeds."""

__version__ = "1.0.0"
