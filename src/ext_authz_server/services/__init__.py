"""
ext_authz_server.services

Service-layer package.

Responsibilities:
- Compose the decision engine stages for one check call.
"""

# Package marker.
