"""
xapi_client.observability

Observability package.

Responsibilities:
- Structured logging configuration for applications embedding the client.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# The library only emits events; configuring sinks is left to the application.
