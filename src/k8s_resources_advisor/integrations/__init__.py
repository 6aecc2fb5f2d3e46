"""Clients for the external systems the advisor reads from."""
