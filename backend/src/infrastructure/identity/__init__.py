"""Session providers backed by the auth layer."""
