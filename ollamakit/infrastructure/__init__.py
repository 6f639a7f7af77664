"""Infrastructure layer - configuration and the HTTP engine."""
