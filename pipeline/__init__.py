"""
pipeline — State owner.

The controller wires gestures and typed text through the codec into a
single state object and publishes every change on an EventBus.
"""
