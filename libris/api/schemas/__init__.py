"""Pydantic schemas for the Libris API."""
