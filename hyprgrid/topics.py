"""
Event Topics for hyprgrid

All pub/sub topics are defined here for easy discovery and documentation.
Topic naming convention: <category>.<action>

Every publish of a topic carries the same keyword arguments, listed with
each topic below.
"""

# Positioning events
POSITION_APPLIED = "position.applied"
"""Published when a window was moved/resized. Params: spec, rect, strategy"""

POSITION_FAILED = "position.failed"
"""Published when a positioning operation fails. Params: spec, error, message"""

VERIFICATION_MISMATCH = "position.verification_mismatch"
"""Published when the final window geometry is outside tolerance. Params: expected, actual"""

# Window state events
STATE_TRANSITION_FAILED = "state.transition_failed"
"""Published when a window could not be made floating. Params: handle, attempts"""

# Command events (imperative - tell components to do something)

CMD_NOTIFY = "cmd.notify"
"""Command: Show a desktop notification. Params: title, body, timeout_ms"""
