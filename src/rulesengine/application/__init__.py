"""Application layer: configuration and serialization."""
