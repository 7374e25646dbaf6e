"""Academy website gateway."""
