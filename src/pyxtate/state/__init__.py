"""State/registry layer.

This package is the single source of truth for per-event (and per-slice)
state and the listeners that observe it.
"""
