"""Print a long-lived bearer token for a user, e.g. for scripts importing containers.

Usage:
    python create_token.py admin [days]
"""

import sys

from homeboard_api.app.core.security import create_access_token

if __name__ == "__main__":
    if len(sys.argv) < 2:
        print("usage: python create_token.py <user name> [days]", file=sys.stderr)
        sys.exit(1)
    days = int(sys.argv[2]) if len(sys.argv) > 2 else 365
    print(create_access_token({"sub": sys.argv[1]}, expires_delta=days * 24 * 60 * 60))
