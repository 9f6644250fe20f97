"""CLI entry points for database administration.

Usage:
  crypto-dashboard-db init
  crypto-dashboard-db issue-token alice@example.com
"""
import argparse
import logging
import sys

from crypto_dashboard.config import Settings
from crypto_dashboard.db.sessions import create_db_engine, init_db
from crypto_dashboard.services.repositories import SessionRepository

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="crypto-dashboard-db")
    parser.add_argument("--database-url", default=Settings.from_env().database_url)
    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("init", help="Create all tables")
    token = sub.add_parser("issue-token", help="Issue a bearer token for a user")
    token.add_argument("email")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO)
    engine = create_db_engine(args.database_url)
    init_db(engine)
    if args.command == "issue-token":
        api_session = SessionRepository(engine).issue(args.email)
        print(f"user_id={api_session.user_id}")
        print(f"token={api_session.token}")
    else:
        logger.info("Tables created at %s", engine.url.render_as_string(hide_password=True))
    return 0


if __name__ == "__main__":
    sys.exit(main())
