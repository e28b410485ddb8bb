#!/usr/bin/env python3
"""
Entry point script to publish pipeline files to a hosted repository.

Usage:
    python run.py --provider github --existing owner/repo \\
        .github/workflows/postman-tests.yml collection.json package.json package-lock.json

    python run.py --provider gitlab --create my-new-repo .gitlab-ci.yml collection.json

File paths are committed relative to the current working directory.

Environment variables:
    GITHUB_TOKEN / GITLAB_TOKEN / BITBUCKET_TOKEN: provider credentials
    BITBUCKET_USERNAME: Bitbucket account name (used with the app password)
    PUBLISH_LOG_FILE: Optional log file (in addition to stdout)
"""
import argparse
import asyncio
import logging
import sys

from common.config.config import DEFAULT_COMMIT_MESSAGE, PUBLISH_LOG_FILE
from publisher.errors import PublishError
from publisher.models.types import Provider, RepositoryMode
from publisher.publish_service import PublishService

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(log_file=None):
    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, mode="a"))
    logging.basicConfig(level=logging.INFO, format=LOG_FORMAT, handlers=handlers)
    # httpx logs every request line at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Publish files to GitHub, GitLab or Bitbucket as a single commit",
    )
    parser.add_argument(
        "--provider",
        required=True,
        help="Version control platform: github, gitlab or bitbucket",
    )
    target = parser.add_mutually_exclusive_group(required=True)
    target.add_argument("--create", metavar="NAME", help="Create a new repository")
    target.add_argument(
        "--existing", metavar="OWNER/NAME", help="Use an existing repository"
    )
    parser.add_argument(
        "--message", default=DEFAULT_COMMIT_MESSAGE, help="Commit message"
    )
    parser.add_argument(
        "--no-verify",
        action="store_true",
        help="Skip CI workflow registration check",
    )
    parser.add_argument("files", nargs="+", help="Files to commit")
    return parser


async def publish(args: argparse.Namespace) -> int:
    provider = Provider.parse(args.provider)
    service = PublishService.for_provider(provider)

    if args.create:
        name, mode = args.create, RepositoryMode.CREATE_NEW
    else:
        name, mode = args.existing, RepositoryMode.USE_EXISTING

    report = await service.publish(
        name, mode, args.files, message=args.message, verify=not args.no_verify
    )

    print(f"Published {len(args.files)} files to {report.repository.full_name}")
    if report.commit.remote_commit_id:
        print(f"Commit: {report.commit.remote_commit_id}")
    if report.verification is not None:
        status = "registered" if report.verification.found else "not registered"
        print(
            f"CI workflow {status} after {report.verification.attempts_used} attempts"
        )
    return 0


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(PUBLISH_LOG_FILE)

    try:
        return asyncio.run(publish(args))
    except PublishError as e:
        step = f" during '{e.step}'" if e.step else ""
        print(f"An error occurred{step}: {e.message}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
