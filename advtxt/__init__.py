"""Room-based interactive fiction engine."""
