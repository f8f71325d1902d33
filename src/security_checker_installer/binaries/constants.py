"""Upstream release constants for the checker binary."""

# GitHub release URL structure
GITHUB_BASE = "https://github.com"
RELEASES_PATH = "releases"
LATEST_PATH = "latest"
DOWNLOAD_PATH = "download"

# Upstream project
CHECKER_OWNER = "fabpot"
CHECKER_REPO = "local-php-security-checker"

RELEASE_DOWNLOAD_URL = (
    f"{GITHUB_BASE}/{CHECKER_OWNER}/{CHECKER_REPO}/"
    f"{RELEASES_PATH}/{LATEST_PATH}/{DOWNLOAD_PATH}/"
)
CHECKSUMS_FILENAME = "checksums.txt"

BINARY_NAME = "local-php-security-checker"
WINDOWS_SUFFIX = ".exe"

BINARY_MODE = 0o755
DIRECTORY_MODE = 0o755
