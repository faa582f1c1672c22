"""Core utilities: exceptions, timezone and trading calendar helpers."""
