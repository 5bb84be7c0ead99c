"""Static game content (masks, actions, events, items, minigames, NPCs, zones).

Loaded once from JSON files and treated as immutable at runtime.
"""
