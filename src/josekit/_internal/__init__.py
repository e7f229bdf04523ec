"""Internal josekit modules. Not part of the public API."""
