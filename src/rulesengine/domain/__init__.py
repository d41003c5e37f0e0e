"""Rules engine domain layer."""
