"""Feature package used by the loader tests."""
