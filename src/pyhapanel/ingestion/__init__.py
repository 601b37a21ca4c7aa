"""Ingestion helpers.

Everything that reads a raw state response lives here: the bounded
response buffer, field extraction, and snapshot building.  Only the
reconciler applies the resulting snapshots.
"""
