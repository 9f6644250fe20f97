"""CLI driving the dashboard's local-first watchlist and alerts.

Without a session, data lives in file-backed local storage. `login` stores a
session and migrates local data to the API; afterwards commands act on the API.

Usage:
  crypto-dashboard watchlist add Bitcoin
  crypto-dashboard watchlist list
  crypto-dashboard alerts create --name "BTC 100k" --coin bitcoin --coin-name Bitcoin \
      --symbol BTC --type price --condition greater_than --threshold 100000
  crypto-dashboard login --token <token> --user-id <id>
  crypto-dashboard logout
"""
import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

import httpx
from pydantic import ValidationError

from crypto_dashboard.config import Settings
from crypto_dashboard.schemas import (AlertCondition, AlertFrequency,
                                      AlertType)
from crypto_dashboard.services.dashboard_factory import (Dashboard,
                                                         create_dashboard)
from crypto_dashboard.session import AuthSession, SessionState
from crypto_dashboard.stores.local import FileStorage

logger = logging.getLogger(__name__)

SESSION_FILE = "session.json"


def print_json(data: object) -> None:
    print(json.dumps(data, indent=2, default=str))


def _dump(items) -> list[dict]:
    return [item.model_dump(mode="json", by_alias=True) for item in items]


def load_session(storage_dir: Path) -> AuthSession | None:
    """Read the saved session, if any."""
    path = storage_dir / SESSION_FILE
    if not path.exists():
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        return AuthSession(user_id=data["user_id"], token=data["token"])
    except (OSError, ValueError, KeyError, TypeError) as exc:
        logger.warning("Ignoring unreadable session file %s: %s", path, exc)
        return None


def save_session(storage_dir: Path, session: AuthSession | None) -> None:
    path = storage_dir / SESSION_FILE
    if session is None:
        path.unlink(missing_ok=True)
        return
    path.write_text(
        json.dumps({"user_id": session.user_id, "token": session.token}), encoding="utf-8"
    )


async def cmd_watchlist_list(dashboard: Dashboard, _: argparse.Namespace) -> int:
    print_json(_dump(await dashboard.watchlist.items()))
    return 0


async def cmd_watchlist_add(dashboard: Dashboard, args: argparse.Namespace) -> int:
    outcome = await dashboard.watchlist.add_coin(args.coin_id)
    if outcome.message:
        print(outcome.message)
    return 0 if outcome.ok else 1


async def cmd_watchlist_remove(dashboard: Dashboard, args: argparse.Namespace) -> int:
    outcome = await dashboard.watchlist.remove_coin(args.coin_id)
    if outcome.message:
        print(outcome.message)
    return 0 if outcome.ok else 1


async def cmd_watchlist_contains(dashboard: Dashboard, args: argparse.Namespace) -> int:
    present = await dashboard.watchlist.is_in_watchlist(args.coin_id)
    print("yes" if present else "no")
    return 0 if present else 1


async def cmd_alerts_list(dashboard: Dashboard, args: argparse.Namespace) -> int:
    if args.coin:
        alerts = await dashboard.alerts.alerts_for_coin(args.coin)
    else:
        alerts = await dashboard.alerts.alerts()
    print_json(_dump(alerts))
    return 0


async def cmd_alerts_create(dashboard: Dashboard, args: argparse.Namespace) -> int:
    outcome = await dashboard.alerts.create_alert(
        {
            "alert_name": args.name,
            "coin_id": args.coin,
            "coin_name": args.coin_name or args.coin,
            "coin_symbol": args.symbol,
            "alert_type": args.type,
            "condition": args.condition,
            "threshold_value": args.threshold,
            "frequency": args.frequency,
        }
    )
    if outcome.ok:
        print(outcome.message)
        print_json(outcome.value.model_dump(mode="json", by_alias=True))
        return 0
    return 1


async def cmd_alerts_update(dashboard: Dashboard, args: argparse.Namespace) -> int:
    updates = {
        key: value
        for key, value in {
            "alert_name": args.name,
            "threshold_value": args.threshold,
            "condition": args.condition,
            "frequency": args.frequency,
        }.items()
        if value is not None
    }
    outcome = await dashboard.alerts.update_alert(args.alert_id, updates)
    if outcome.message:
        print(outcome.message)
    return 0 if outcome.ok else 1


async def cmd_alerts_toggle(dashboard: Dashboard, args: argparse.Namespace) -> int:
    outcome = await dashboard.alerts.toggle_alert(args.alert_id)
    if outcome.message:
        print(outcome.message)
    return 0 if outcome.ok else 1


async def cmd_alerts_delete(dashboard: Dashboard, args: argparse.Namespace) -> int:
    outcome = await dashboard.alerts.delete_alert(args.alert_id)
    return 0 if outcome.ok else 1


async def cmd_login(dashboard: Dashboard, args: argparse.Namespace) -> int:
    session = AuthSession(user_id=args.user_id, token=args.token)
    if not dashboard.sessions.set(session):
        print("Already signed in")
        return 0
    reports = await dashboard.sync.wait()
    save_session(args.storage_dir, session)
    for report in reports:
        print(f"{report.family}: {report.migrated}/{report.attempted} migrated")
    return 0


async def cmd_logout(dashboard: Dashboard, args: argparse.Namespace) -> int:
    dashboard.sessions.clear()
    save_session(args.storage_dir, None)
    print("Signed out")
    return 0


def build_parser(settings: Settings) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="crypto-dashboard",
        description="Manage the crypto dashboard watchlist and alerts",
    )
    parser.add_argument("--api-url", default=settings.api_url, help="Dashboard API base URL")
    parser.add_argument(
        "--storage-dir", type=Path, default=settings.storage_dir,
        help="Directory holding local data and the saved session",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    watchlist = sub.add_parser("watchlist", help="Watchlist commands")
    wl_sub = watchlist.add_subparsers(dest="action", required=True)
    wl_sub.add_parser("list", help="Show the watchlist").set_defaults(func=cmd_watchlist_list)
    for name, func, help_text in (
        ("add", cmd_watchlist_add, "Add a coin"),
        ("remove", cmd_watchlist_remove, "Remove a coin"),
        ("contains", cmd_watchlist_contains, "Check whether a coin is watched"),
    ):
        p = wl_sub.add_parser(name, help=help_text)
        p.add_argument("coin_id", help="CoinGecko ID (e.g. bitcoin)")
        p.set_defaults(func=func)

    alerts = sub.add_parser("alerts", help="Alert commands")
    al_sub = alerts.add_subparsers(dest="action", required=True)
    p = al_sub.add_parser("list", help="Show alerts")
    p.add_argument("--coin", help="Only alerts for this coin ID")
    p.set_defaults(func=cmd_alerts_list)

    p = al_sub.add_parser("create", help="Create an alert")
    p.add_argument("--name", required=True)
    p.add_argument("--coin", required=True, help="CoinGecko ID")
    p.add_argument("--coin-name")
    p.add_argument("--symbol", required=True)
    p.add_argument("--type", choices=[t.value for t in AlertType], default=AlertType.PRICE.value)
    p.add_argument("--condition", choices=[c.value for c in AlertCondition], required=True)
    p.add_argument("--threshold", required=True)
    p.add_argument(
        "--frequency", choices=[f.value for f in AlertFrequency], default=AlertFrequency.ONCE.value
    )
    p.set_defaults(func=cmd_alerts_create)

    p = al_sub.add_parser("update", help="Edit an alert")
    p.add_argument("alert_id")
    p.add_argument("--name")
    p.add_argument("--threshold")
    p.add_argument("--condition", choices=[c.value for c in AlertCondition])
    p.add_argument("--frequency", choices=[f.value for f in AlertFrequency])
    p.set_defaults(func=cmd_alerts_update)

    for name, func, help_text in (
        ("toggle", cmd_alerts_toggle, "Activate/deactivate an alert"),
        ("delete", cmd_alerts_delete, "Delete an alert"),
    ):
        p = al_sub.add_parser(name, help=help_text)
        p.add_argument("alert_id")
        p.set_defaults(func=func)

    p = sub.add_parser("login", help="Store a session and sync local data to the API")
    p.add_argument("--token", default=settings.token, required=settings.token is None)
    p.add_argument("--user-id", default=settings.user_id, required=settings.user_id is None)
    p.set_defaults(func=cmd_login)

    sub.add_parser("logout", help="Forget the stored session").set_defaults(func=cmd_logout)
    return parser


async def run_command(args: argparse.Namespace, settings: Settings) -> int:
    storage = FileStorage(args.storage_dir)
    sessions = SessionState(load_session(args.storage_dir))
    async with httpx.AsyncClient(base_url=args.api_url, timeout=10.0) as client:
        dashboard = create_dashboard(
            storage, client, sessions, stale_time=settings.stale_seconds
        )
        try:
            return await args.func(dashboard, args)
        except ValidationError as exc:
            print(f"Invalid input: {exc}", file=sys.stderr)
            return 2
        finally:
            dashboard.close()


def main(argv: list[str] | None = None) -> int:
    settings = Settings.from_env()
    args = build_parser(settings).parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else settings.log_level,
        format="%(levelname)s %(name)s: %(message)s",
    )
    return asyncio.run(run_command(args, settings))


if __name__ == "__main__":
    sys.exit(main())
