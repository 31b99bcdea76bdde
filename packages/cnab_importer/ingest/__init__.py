"""Catalog seeding utilities."""
