"""
ext_authz_server

Top-level package for the external authorization decision service.

Responsibilities:
- Expose package version metadata.
"""

__all__ = ["__version__"]

__version__ = "0.1.0"


# --- Module Notes -----------------------------------------------------------
# Keep this file minimal; the app factory wires policy data at startup, not at import.
