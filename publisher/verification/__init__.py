"""
Post-publish verification package.
"""

from publisher.verification.verifier import PublishVerifier

__all__ = ["PublishVerifier"]
