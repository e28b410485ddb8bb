"""
Publisher Package

Publishes a set of local files as a single commit to a hosted repository on
GitHub, GitLab or Bitbucket, bootstrapping the repository first and verifying
CI workflow registration afterwards where the provider supports it.

Main Components:
- PublishService: facade for a full publish run (publisher.publish_service)
- Gateways: typed provider API operations (publisher.gateways)
- RepositoryBootstrapper: create/seed the target repository (publisher.bootstrap)
- CommitOrchestrator: provider commit protocols (publisher.orchestrator)
- PublishVerifier: CI workflow registration polling (publisher.verification)
"""

__version__ = "1.0.0"
