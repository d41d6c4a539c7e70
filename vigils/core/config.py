"""
Service configuration read from the environment (and an optional .env file).
"""

import os
from pathlib import Path
from typing import List

from dotenv import load_dotenv

load_dotenv()

# Version string
VERSION = "1.0.0"

# DEBUG is read through debug_enabled()
PORT = int(os.getenv("PORT", "3000"))

# Remote storage (BDO) endpoints, in pull preference order
DEFAULT_BDO_SERVERS = (
    "https://dev.bdo.allyabase.com,"
    "https://ent.bdo.allyabase.com,"
    "https://ind.bdo.allyabase.com"
)
BDO_SERVERS = [s.strip() for s in os.getenv("BDO_SERVERS", DEFAULT_BDO_SERVERS).split(",") if s.strip()]
VIGILS_HASH = os.getenv("VIGILS_HASH", "justiceforgood-all-vigils")
KEYS_FILE = os.getenv("KEYS_FILE", "./data/bdo-keys.json")

# Admin moderation
ADMIN_PUBKEY = os.getenv(
    "ADMIN_PUBKEY",
    "030202e359413cdf78d8202e80ebec05e7b2edc51750de45a8eb9326e9f824d7b8",
)
ADMIN_SIGNATURE_WINDOW_MS = int(os.getenv("ADMIN_SIGNATURE_WINDOW_MS", "120000"))

# Geocoding and search
ZIPCODE_API_URL = os.getenv("ZIPCODE_API_URL", "https://api.zippopotam.us/us")
SEARCH_RADIUS_MILES = float(os.getenv("SEARCH_RADIUS_MILES", "10"))
HTTP_TIMEOUT_SEC = float(os.getenv("HTTP_TIMEOUT_SEC", "8"))

# Web surface
STATIC_DIR = os.getenv("STATIC_DIR", "./static")
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]

# Startup replication (disabled in tests that build their own state)
BOOTSTRAP_ON_STARTUP = os.getenv("BOOTSTRAP_ON_STARTUP", "true").lower() == "true"


def debug_enabled():
    """Check if debug mode is enabled."""
    return os.getenv("DEBUG", "false").lower() == "true"


def get_bdo_servers() -> List[str]:
    """Get configured remote storage endpoints."""
    return list(BDO_SERVERS)


def get_keys_file() -> Path:
    """Get the credential file path."""
    return Path(KEYS_FILE)


def validate_config():
    """Validate configuration and return any issues."""
    issues = []

    if not BDO_SERVERS:
        issues.append("BDO_SERVERS must name at least one endpoint")

    for server in BDO_SERVERS:
        if not server.startswith(("http://", "https://")):
            issues.append(f"Invalid BDO server URL: {server}")

    if SEARCH_RADIUS_MILES <= 0:
        issues.append("SEARCH_RADIUS_MILES must be > 0")

    if ADMIN_SIGNATURE_WINDOW_MS < 1:
        issues.append("ADMIN_SIGNATURE_WINDOW_MS must be >= 1")

    if HTTP_TIMEOUT_SEC <= 0:
        issues.append("HTTP_TIMEOUT_SEC must be > 0")

    try:
        bytes.fromhex(ADMIN_PUBKEY)
    except ValueError:
        issues.append("ADMIN_PUBKEY must be a hex-encoded public key")

    return issues
