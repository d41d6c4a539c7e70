#!/usr/bin/env python3
"""
Sign the current timestamp with the administrator's private key and print
a moderation URL. The URL stays valid for the admin signature window.
"""

import argparse
import os
import sys
import time
from pathlib import Path
from urllib.parse import urlencode

# Add the repository root to sys.path so the packages import without installing
sys.path.insert(0, str(Path(__file__).parent.parent))

from vigils.core.identity import generate_keys, public_key_for, sign_message


def main():
    parser = argparse.ArgumentParser(
        description="Produce a signed /admin URL",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s --generate                          # Print a new admin keypair
  ADMIN_PRIVATE_KEY=... %(prog)s               # Signed URL for http://localhost:3000
  ADMIN_PRIVATE_KEY=... %(prog)s --base-url https://vigils.example.org

The server must be configured with the matching ADMIN_PUBKEY.
        """
    )
    parser.add_argument("--base-url", default="http://localhost:3000", help="Service base URL")
    parser.add_argument("--private-key", help="Admin private key hex (default: $ADMIN_PRIVATE_KEY)")
    parser.add_argument("--generate", action="store_true", help="Generate and print a new admin keypair")
    args = parser.parse_args()

    if args.generate:
        private_hex, public_hex = generate_keys()
        print(f"ADMIN_PRIVATE_KEY={private_hex}")
        print(f"ADMIN_PUBKEY={public_hex}")
        return 0

    private_key = args.private_key or os.getenv("ADMIN_PRIVATE_KEY")
    if not private_key:
        print("Error: pass --private-key or set ADMIN_PRIVATE_KEY", file=sys.stderr)
        return 1

    try:
        public_hex = public_key_for(private_key)
    except ValueError as e:
        print(f"Error: invalid private key: {e}", file=sys.stderr)
        return 1

    timestamp = str(int(time.time() * 1000))
    query = urlencode({"timestamp": timestamp, "signature": sign_message(private_key, timestamp)})
    print(f"# public key: {public_hex}")
    print(f"{args.base_url.rstrip('/')}/admin?{query}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
