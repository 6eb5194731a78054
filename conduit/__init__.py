"""Conduit: blogging-platform backend over a concurrent in-memory store."""
