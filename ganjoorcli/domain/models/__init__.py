"""Domain models: value objects and the archive's resource types."""
