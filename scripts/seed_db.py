"""Create (or reset) the bootstrap admin account.

Credentials come from ADMIN_USERNAME / ADMIN_EMAIL / ADMIN_PASSWORD; a
password given on the command line wins over the environment.
"""

from __future__ import annotations

import argparse
import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.roster_attendance.roster_attendance.database.bootstrap import ensure_admin


def main() -> None:
    parser = argparse.ArgumentParser(description="Create the bootstrap admin account")
    parser.add_argument("--password", help="admin password (defaults to ADMIN_PASSWORD)")
    args = parser.parse_args()

    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)

    password = args.password or getattr(settings, "ADMIN_PASSWORD", "")
    if not password:
        raise SystemExit("Set ADMIN_PASSWORD or pass --password")

    username = getattr(settings, "ADMIN_USERNAME", "admin")
    ensure_admin(
        db_config,
        username=username,
        email=getattr(settings, "ADMIN_EMAIL", "admin@example.com"),
        password=password,
    )

    print(
        f"OK: Admin '{username}' ready -> "
        f"{db_config.get('user')}@{db_config.get('host')}:{db_config.get('port', 3306)}/{db_config.get('database')}"
    )


if __name__ == "__main__":
    main()
