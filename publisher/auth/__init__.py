"""
Credential handling for hosting providers.
"""

from publisher.auth.credentials import resolve_credential

__all__ = ["resolve_credential"]
