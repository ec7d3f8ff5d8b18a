"""HTTP API for Libris import operations."""
