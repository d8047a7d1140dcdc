"""Infrastructure adapters (storage, persistence, identity)."""
