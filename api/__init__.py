"""
HTTP API layer

Thin routers: they translate requests into core calls and core exceptions
into HTTP status codes. No game logic lives here.
"""
