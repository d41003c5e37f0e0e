"""Cross-cutting utilities shared by the engine layers."""
