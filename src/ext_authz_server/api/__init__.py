"""
ext_authz_server.api

API package for the external authorization service.

Responsibilities:
- FastAPI app factory and router modules.
- API-layer dependency wiring.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# Routers stay thin: translate the transport shape, delegate to DecisionService.
