# fixit/cli/__main__.py
import argparse
import json
import sys
from pathlib import Path

from fixit.core.errors import RepairError
from fixit.server.settings.config import settings
from fixit.services.repair_service import RepairService
from fixit.services.repair_store import RepairStore

USAGE_EXAMPLES = """Examples:
  python -m fixit.cli list
  python -m fixit.cli quote 1714564800000 49.99
  python -m fixit.cli complete 1714564800000
  python -m fixit.cli delete 1714564800000
  python -m fixit.cli serve --port 3000
"""


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="python -m fixit.cli",
        description="Manage the repair ledger without the dashboard.",
        epilog=USAGE_EXAMPLES,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    p.add_argument("--ledger", default=settings.repairs_file, help="path to repairs.json")
    p.add_argument("--uploads", default=settings.upload_dir, help="upload directory")

    sub = p.add_subparsers(dest="cmd", required=True)
    sub.add_parser("list", help="print all repair requests as JSON")

    c = sub.add_parser("complete", help="mark a repair as completed")
    c.add_argument("id", type=int)

    q = sub.add_parser("quote", help="set the quote for a repair")
    q.add_argument("id", type=int)
    q.add_argument("amount")

    d = sub.add_parser("delete", help="delete a repair and its photo")
    d.add_argument("id", type=int)

    s = sub.add_parser("serve", help="run the web app with uvicorn")
    s.add_argument("--host", default="127.0.0.1")
    s.add_argument("--port", type=int, default=3000)
    return p


def main(argv=None) -> int:
    args = _build_parser().parse_args(argv)

    if args.cmd == "serve":
        import uvicorn
        uvicorn.run("fixit.server.main:app", host=args.host, port=args.port)
        return 0

    service = RepairService(RepairStore(Path(args.ledger)), upload_dir=Path(args.uploads))

    try:
        if args.cmd == "list":
            out = [r.to_json() for r in service.list_all()]
            sys.stdout.write(json.dumps(out, ensure_ascii=False, indent=2) + "\n")
            return 0

        if args.cmd == "complete":
            found = service.mark_complete(args.id)
        elif args.cmd == "quote":
            found = service.set_quote(args.id, args.amount)
        else:
            found = service.delete(args.id)
    except RepairError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    if not found:
        # okänt id är ingen ändring, inget fel
        print(f"No repair with id {args.id}, nothing changed", file=sys.stderr)
    print("ok")
    return 0


if __name__ == "__main__":
    sys.exit(main())
