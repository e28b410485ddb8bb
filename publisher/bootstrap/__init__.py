"""
Repository bootstrapping package.
"""

from publisher.bootstrap.bootstrapper import RepositoryBootstrapper

__all__ = ["RepositoryBootstrapper"]
