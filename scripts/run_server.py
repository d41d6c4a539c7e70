#!/usr/bin/env python3
"""
Run the vigil finder API under uvicorn.
"""

import argparse
import sys
from pathlib import Path

import uvicorn

# Add the repository root to sys.path so the packages import without installing
sys.path.insert(0, str(Path(__file__).parent.parent))

from vigils.core import config


def main():
    parser = argparse.ArgumentParser(
        description="Run the vigil finder API",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Environment variables:
- BDO_SERVERS=https://a.example,https://b.example (storage endpoints, pull order)
- KEYS_FILE=./data/bdo-keys.json (credential file, created on first start)
- ADMIN_PUBKEY=... (administrator public key for /admin)
- STATIC_DIR=./static (index.html and browser assets)
        """
    )
    parser.add_argument("--host", default="0.0.0.0", help="Bind address (default: 0.0.0.0)")
    parser.add_argument("--port", type=int, default=config.PORT, help=f"Port (default: {config.PORT})")
    parser.add_argument("--reload", action="store_true", help="Reload on code changes (development)")
    args = parser.parse_args()

    issues = config.validate_config()
    if issues:
        for issue in issues:
            print(f"Configuration error: {issue}", file=sys.stderr)
        return 1

    uvicorn.run("vigils.api.main:app", host=args.host, port=args.port, reload=args.reload)
    return 0


if __name__ == "__main__":
    sys.exit(main())
