"""
ui — Browser interaction surface.

A FastAPI app serving the dot board page and relaying its pointer, touch,
text and lifecycle events to the controller.
"""
