"""
CrownSync - API Package

This package contains the HTTP client for the team backend.
"""

from .cloud_backend_api import CloudBackendAPI, is_org_write_role, parse_timestamp

__all__ = ['CloudBackendAPI', 'is_org_write_role', 'parse_timestamp']
