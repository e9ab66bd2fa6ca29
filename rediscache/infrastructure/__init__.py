"""Infrastructure adapters for the distributed cache."""
