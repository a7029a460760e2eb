"""
safety — Exposure guard.

Wipes the board whenever the page is hidden, unloaded or the device comes
online, and keeps input locked while a network connection is present.
"""
