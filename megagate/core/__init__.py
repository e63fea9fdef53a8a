"""Core gateway components."""
