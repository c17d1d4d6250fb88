"""CLI client for the watchlist_sync HTTP API.

Usage:
  poetry run watchlist-client --user u1 health
  poetry run watchlist-client --user u1 watchlist add AAPL "Apple Inc."
  poetry run watchlist-client --user u1 watchlist list
  poetry run watchlist-client --user u1 alerts create AAPL "Apple Inc." upper 200
"""
import argparse
import json
import sys

import httpx

from watchlist_sync.services.formatting import alert_text, is_triggered
from watchlist_sync.session import USER_EMAIL_HEADER, USER_ID_HEADER


def print_json(data: object) -> None:
    print(json.dumps(data, indent=2, default=str))


def _print_envelope(r: httpx.Response) -> int:
    """Envelope routes use 4xx for expected failures; print the body either way."""
    print_json(r.json())
    return 0 if r.is_success else 1


def cmd_health(client: httpx.Client, _: argparse.Namespace) -> int:
    r = client.get("/")
    r.raise_for_status()
    print_json(r.json())
    return 0


def cmd_watchlist_list(client: httpx.Client, args: argparse.Namespace) -> int:
    r = client.get("/watchlist")
    r.raise_for_status()
    rows = r.json()
    if args.json:
        print_json(rows)
        return 0
    if not rows:
        print("Watchlist is empty")
        return 0
    for row in rows:
        print(
            f"{row['symbol']:<8} {row['company'][:28]:<28} "
            f"{row.get('price_formatted') or '-':>12} {row.get('change_formatted') or '-':>9} "
            f"{row.get('market_cap') or '-':>10} {row.get('pe_ratio') or '-':>7}"
        )
    return 0


def cmd_watchlist_status(client: httpx.Client, _: argparse.Namespace) -> int:
    r = client.get("/watchlist/status")
    r.raise_for_status()
    data = r.json()
    print(f"status={data['status']} items={len(data['items'])}")
    return 0


def cmd_watchlist_has(client: httpx.Client, args: argparse.Namespace) -> int:
    r = client.get(f"/watchlist/{args.symbol}/membership")
    r.raise_for_status()
    print_json(r.json())
    return 0


def cmd_watchlist_add(client: httpx.Client, args: argparse.Namespace) -> int:
    r = client.post("/watchlist", json={"symbol": args.symbol, "company": args.company})
    return _print_envelope(r)


def cmd_watchlist_remove(client: httpx.Client, args: argparse.Namespace) -> int:
    return _print_envelope(client.delete(f"/watchlist/{args.symbol}"))


def _alert_body(args: argparse.Namespace) -> dict[str, str]:
    return {
        "symbol": args.symbol,
        "company": args.company,
        "alert_name": args.name or f"{args.symbol.upper()} {args.alert_type} {args.threshold}",
        "alert_type": args.alert_type,
        "threshold": args.threshold,
    }


def cmd_alerts_list(client: httpx.Client, args: argparse.Namespace) -> int:
    r = client.get("/alerts")
    r.raise_for_status()
    alerts = r.json()
    if args.json:
        print_json(alerts)
        return 0
    if not alerts:
        print("No alerts")
        return 0
    for a in alerts:
        # snapshot price from the last create/update, not a live quote
        hit = "*" if is_triggered(a["alert_type"], a["threshold"], a.get("current_price")) else " "
        print(
            f"{hit} {a['id']:>5} {a['symbol']:<8} {a['alert_name'][:28]:<28} "
            f"{alert_text(a['alert_type'], a['threshold'])}"
        )
    return 0


def cmd_alerts_create(client: httpx.Client, args: argparse.Namespace) -> int:
    return _print_envelope(client.post("/alerts", json=_alert_body(args)))


def cmd_alerts_update(client: httpx.Client, args: argparse.Namespace) -> int:
    return _print_envelope(client.put(f"/alerts/{args.alert_id}", json=_alert_body(args)))


def cmd_alerts_delete(client: httpx.Client, args: argparse.Namespace) -> int:
    return _print_envelope(client.delete(f"/alerts/{args.alert_id}"))


def _add_alert_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("symbol", help="Ticker (e.g. AAPL)")
    p.add_argument("company", help="Company name")
    p.add_argument("alert_type", choices=["upper", "lower"], help="Crossing direction")
    p.add_argument("threshold", help="Price threshold (> 0)")
    p.add_argument("--name", default=None, help="Alert name (default: generated)")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Call the watchlist_sync API")
    parser.add_argument("--base-url", default="http://127.0.0.1:8001", help="API base URL")
    parser.add_argument("--timeout", type=float, default=30.0, help="Request timeout (seconds)")
    parser.add_argument("--user", default=None, help=f"Value for the {USER_ID_HEADER} header")
    parser.add_argument("--email", default=None, help=f"Value for the {USER_EMAIL_HEADER} header")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("health", help="GET /")

    wl = subparsers.add_parser("watchlist", help="Watchlist routes (/watchlist)")
    wl_sub = wl.add_subparsers(dest="watchlist_cmd", required=True)
    p = wl_sub.add_parser("list", help="GET /watchlist")
    p.add_argument("--json", action="store_true", help="Print raw JSON")
    wl_sub.add_parser("status", help="GET /watchlist/status")
    p = wl_sub.add_parser("has", help="GET /watchlist/{symbol}/membership")
    p.add_argument("symbol")
    p = wl_sub.add_parser("add", help="POST /watchlist")
    p.add_argument("symbol")
    p.add_argument("company")
    p = wl_sub.add_parser("remove", help="DELETE /watchlist/{symbol}")
    p.add_argument("symbol")

    al = subparsers.add_parser("alerts", help="Alert routes (/alerts)")
    al_sub = al.add_subparsers(dest="alerts_cmd", required=True)
    p = al_sub.add_parser("list", help="GET /alerts")
    p.add_argument("--json", action="store_true", help="Print raw JSON")
    _add_alert_args(al_sub.add_parser("create", help="POST /alerts"))
    p = al_sub.add_parser("update", help="PUT /alerts/{alert_id}")
    p.add_argument("alert_id")
    _add_alert_args(p)
    p = al_sub.add_parser("delete", help="DELETE /alerts/{alert_id}")
    p.add_argument("alert_id")
    return parser


HANDLERS = {
    "health": cmd_health,
    "watchlist": {
        "list": cmd_watchlist_list,
        "status": cmd_watchlist_status,
        "has": cmd_watchlist_has,
        "add": cmd_watchlist_add,
        "remove": cmd_watchlist_remove,
    },
    "alerts": {
        "list": cmd_alerts_list,
        "create": cmd_alerts_create,
        "update": cmd_alerts_update,
        "delete": cmd_alerts_delete,
    },
}


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    cmd = args.command
    if cmd == "health":
        handler = HANDLERS["health"]
    else:
        handler = HANDLERS[cmd][getattr(args, f"{cmd}_cmd")]

    headers: dict[str, str] = {}
    if args.user:
        headers[USER_ID_HEADER] = args.user
    if args.email:
        headers[USER_EMAIL_HEADER] = args.email
    try:
        with httpx.Client(base_url=args.base_url.rstrip("/"), timeout=args.timeout, headers=headers) as client:
            return handler(client, args)
    except httpx.HTTPStatusError as e:
        print(f"HTTP error: {e.response.status_code}", file=sys.stderr)
        if e.response.content:
            try:
                print(e.response.json(), file=sys.stderr)
            except ValueError:
                print(e.response.text, file=sys.stderr)
        return 1
    except httpx.RequestError as e:
        print(f"Request error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
