import os

VERSION = "0.3.0"
APP_SCHEMA_VERSION = "1.0.0"

COMMIT = os.getenv("TREEDO_COMMIT", "none")
BUILD_DATE = os.getenv("TREEDO_BUILD_DATE", "unknown")


def version_banner() -> str:
    """Build metadata line printed by ``td --version``."""
    return f"td version {VERSION}, commit {COMMIT}, date {BUILD_DATE}"
