"""Boundary schemas for the remote API."""
