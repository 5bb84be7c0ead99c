"""Precondition checks run before an effect bundle is resolved.

Actions, events, items and minigames all flow through the same validators so
refusals look the same regardless of entry point.
"""
