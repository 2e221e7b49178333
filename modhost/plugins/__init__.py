"""Built-in features. Every module here exposes ``setup(host, settings)``."""
