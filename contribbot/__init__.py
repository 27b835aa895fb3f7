"""ContribBot: a Discord linked role for recent GitHub contributors."""

__version__ = "0.1.0"
