"""
Publisher configuration module.

All settings are read from the environment (optionally seeded from a .env file)
and exposed as module-level constants.
"""

import os

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


# Provider credentials
GITHUB_TOKEN = os.getenv("GITHUB_TOKEN")
GITLAB_TOKEN = os.getenv("GITLAB_TOKEN")
BITBUCKET_TOKEN = os.getenv("BITBUCKET_TOKEN")
BITBUCKET_USERNAME = os.getenv("BITBUCKET_USERNAME")

# Provider API endpoints
GITHUB_API_URL = os.getenv("GITHUB_API_URL", "https://api.github.com")
GITHUB_API_VERSION = os.getenv("GITHUB_API_VERSION", "2022-11-28")
GITLAB_API_URL = os.getenv("GITLAB_API_URL", "https://gitlab.com/api/v4")
BITBUCKET_API_URL = os.getenv("BITBUCKET_API_URL", "https://api.bitbucket.org/2.0")

# HTTP transport
HTTP_TIMEOUT_SECONDS = float(os.getenv("HTTP_TIMEOUT_SECONDS", "150"))
HTTP_CONNECT_TIMEOUT_SECONDS = float(os.getenv("HTTP_CONNECT_TIMEOUT_SECONDS", "60"))
HTTP_CONNECT_RETRIES = int(os.getenv("HTTP_CONNECT_RETRIES", "2"))

# Workflow registration polling
VERIFY_MAX_RETRIES = int(os.getenv("VERIFY_MAX_RETRIES", "3"))
VERIFY_DELAY_SECONDS = float(os.getenv("VERIFY_DELAY_SECONDS", "10"))
VERIFY_SETTLE_SECONDS = float(os.getenv("VERIFY_SETTLE_SECONDS", "10"))

# Logging
PUBLISH_LOG_FILE = os.getenv("PUBLISH_LOG_FILE")

# Constants
DEFAULT_BRANCH = "main"
README_PATH = "README.md"
INITIAL_COMMIT_MESSAGE = "Initial commit"
DEFAULT_COMMIT_MESSAGE = "Create Pipeline Config"

GITHUB_PIPELINE_PATH = ".github/workflows/postman-tests.yml"
GITLAB_PIPELINE_PATH = ".gitlab-ci.yml"
BITBUCKET_PIPELINE_PATH = "bitbucket-pipelines.yml"
