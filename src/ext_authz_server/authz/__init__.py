"""
ext_authz_server.authz

Authorization decision engine.

Responsibilities:
- Extract typed request facts (path, headers, routed service).
- Evaluate the active policy and produce a `Decision`.
- Build enrichment headers and map decisions onto the ext_authz wire contract.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# Nothing in this package performs I/O; it is safe to call from any worker concurrently.
