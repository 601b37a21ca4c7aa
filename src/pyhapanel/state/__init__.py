"""State layer.

This package is the single source of truth for device values and the only
place where polled snapshots and user gestures are merged into them.
"""
