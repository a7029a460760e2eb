"""
core — Constants, configuration, structured logging and the drag-phase FSM.
"""
