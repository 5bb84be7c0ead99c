"""Core game rules: clock, mask loadout, inventory and effect resolution.

Works on the pydantic player snapshot from `masks.api.models` but never
touches FastAPI routing or Redis, so handlers, tests and tools can share it.
"""
