"""Create a verified user directly in MongoDB.

Usage:
  python scripts/create_user.py --name Alice --email alice@example.com --password '...' --role admin

NOTE: This is intended for setting up a fresh deployment; regular accounts
go through /auth/register.
"""

import argparse
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

from vnjp_cms.config import load_config
from vnjp_cms.db import connect, init_db
from vnjp_cms.auth.crud import create_user, public_user


def main() -> None:
    ap = argparse.ArgumentParser()
    ap.add_argument("--name", required=True)
    ap.add_argument("--email", required=True)
    ap.add_argument("--password", required=True)
    ap.add_argument("--role", choices=["user", "admin"], default="user")
    args = ap.parse_args()

    cfg = load_config()
    db = connect(cfg)
    init_db(db)

    u = create_user(db, name=args.name, email=args.email, password=args.password, role=args.role, verified=True)

    print("Created user:")
    print(public_user(u))


if __name__ == "__main__":
    main()
