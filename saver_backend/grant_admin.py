"""
Role Assignment Script

Grants (or revokes) the admin role of an existing account. This is the only
way an account becomes an admin: there is no HTTP route for it.

Usage
-----
    python -m saver_backend.grant_admin --email someone@example.org
    python -m saver_backend.grant_admin --email someone@example.org --role member

Notes
-----
- The account must already exist (signed up through the app).
- A missing status row is created on the way.
"""

import argparse
import logging

from saver_backend.database.config.connection_engine import create_schema
from saver_backend.database.core.funcs import set_role
from saver_backend.database.entities.user_status import ROLES, ROLE_ADMIN


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Assign a role to a Saver account.")
    parser.add_argument("--email", required=True, help="E-mail of the account.")
    parser.add_argument("--role", default=ROLE_ADMIN, choices=ROLES, help="Role to assign (default: admin).")
    return parser.parse_args(argv)


def main(argv=None) -> None:
    """
    Parameters
    ----------
    argv : list[str], optional
        Command-line arguments; `sys.argv[1:]` when omitted.
    """
    args = parse_args(argv)
    create_schema()
    status = set_role(email=args.email, role=args.role)
    print(f"{args.email} now has role '{status.role}'")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    main()
