"""Print a long-lived access token for a user id.

Handy for scripts and API exploration.  The token is signed with the
``SECRET_KEY`` of the current environment, so run this with the same
configuration as the server.

Usage:
    python create_token.py 1 --days 365
"""
import argparse
from typing import Optional, Sequence

from auto_services_api.app.core.security import create_access_token


def main(argv: Optional[Sequence[str]] = None) -> str:
    ap = argparse.ArgumentParser(description="Create an access token for a user.")
    ap.add_argument("user_id", type=int, help="ID of the user the token identifies")
    ap.add_argument("--days", type=int, default=365, help="Token lifetime in days (default 365)")
    args = ap.parse_args(argv)

    token = create_access_token({"sub": str(args.user_id)}, expires_delta=args.days * 24 * 60 * 60)
    print(token)
    return token


if __name__ == "__main__":
    main()
