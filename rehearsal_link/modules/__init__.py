"""Feature modules: analysis and segment editing."""
