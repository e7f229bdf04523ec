"""josekit tests."""
