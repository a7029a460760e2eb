"""
input — Pointer and touch gesture fusion.

Turns mouse drags, touch drags and taps into a clean stream of single-dot
toggles, discarding the synthetic mouse events touch screens emit.
"""
