"""
Centralized constants for the automagik-forge launcher.

Binary names, flags and environment keys shared by the resolver,
extractor and dispatcher live here so they stay in one place.
"""

# ============================================================================
# Bundled Binaries
# ============================================================================

PRIMARY_BINARY = "automagik-forge"
"""Base name of the interactive application binary."""

MCP_BINARY = "automagik-forge-mcp"
"""Base name of the automation (MCP) server binary."""

ARCHIVE_SUFFIX = ".zip"
"""Every binary ships as ``<base name>.zip`` inside its platform directory."""

DIST_DIR_NAME = "dist"
"""Directory under the install location holding one folder per platform."""

EXTRACT_LOCK_NAME = ".extract.lock"


# ============================================================================
# Platforms
# ============================================================================

SUPPORTED_PLATFORMS = {
    ("linux", "x64"): "linux-x64",
    ("linux", "arm64"): "linux-arm64",
    ("windows", "x64"): "windows-x64",
    ("windows", "arm64"): "windows-arm64",
    ("macos", "x64"): "macos-x64",
    ("macos", "arm64"): "macos-arm64",
}
"""(os family, cpu arch) -> platform key used as the dist sub-directory."""

PLATFORM_LABELS = (
    "Linux x64",
    "Linux ARM64",
    "Windows x64",
    "Windows ARM64",
    "macOS x64 (Intel)",
    "macOS ARM64 (Apple Silicon)",
)
"""Human readable list printed when the host is not supported."""

TRANSLATION_SYSCTL = ("sysctl", "-in", "sysctl.proc_translated")
"""Reports ``1`` when the current process runs under Rosetta."""


# ============================================================================
# Command Line
# ============================================================================

FLAG_MCP = "--mcp"
FLAG_MCP_ADVANCED = "--mcp-advanced"
CHILD_FLAG_ADVANCED = "--advanced"


# ============================================================================
# Environment
# ============================================================================

DOTENV_FILENAME = ".env"
"""Optional key/value file read from the current working directory."""

PORT_ENV_KEYS = ("BACKEND_PORT", "PORT")
"""Either variable counts as an explicitly configured port."""

DEFAULT_BACKEND_PORT = "8887"
"""Port handed to the application when no port variable is set."""

DEFAULT_EXTRACT_LOCK_TIMEOUT = 30.0
"""Seconds to wait for another launcher to finish unpacking."""
