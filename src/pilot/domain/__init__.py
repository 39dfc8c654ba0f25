"""Domain layer: event primitive, environments, settings types."""
