"""Hot-swappable feature modules for a long-running Discord bot."""

__version__ = "0.1.0"
