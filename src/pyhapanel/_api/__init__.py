"""Endpoint helpers for the remote state store REST API."""
