"""Infrastructure layer: backing store adapters."""
