"""
xapi_client.orchestration

Request orchestration layer.

Responsibilities:
- Argument validation, conditional-write preconditions, request routing,
  dispatch through the transport, and multi-page statement walks.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# Call sites should go through `xapi_client.client.XAPIClient`; these modules stay
# importable on their own so they can be tested without a record store.
