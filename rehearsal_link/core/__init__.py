"""Core layer: errors, data models, configuration and audio adapters."""
