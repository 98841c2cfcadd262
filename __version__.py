# ============================================================================
# VERSION - CONSENSUS NETWORK DEPLOYER
# ============================================================================
"""
Version information for the consensus network deployer.

This is the single source of truth for the application version.
Updated manually for each release.
"""
# Version format: major.minor.patch
__version__ = "0.4.1"
__version_info__ = tuple(int(x) for x in __version__.split("."))

# Build metadata
BUILD_DATE = "2026-10-17"

# Remote config document schema written by this release
REMOTE_CONFIG_SCHEMA_VERSION = 1
