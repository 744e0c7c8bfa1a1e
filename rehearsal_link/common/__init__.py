"""Shared building blocks: logging and numeric primitives."""
