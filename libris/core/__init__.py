"""Core import pipeline for Libris."""
