"""Seller KYC HTTP layer (seller and admin routers)."""
