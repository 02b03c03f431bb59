# Config Baskets v1.0.0
#!/usr/bin/env python3
"""
Config Baskets CLI

Command-line interface for exporting, snapshotting, restoring and
uploading configuration baskets.
"""
import argparse
import logging
import sys
from contextlib import contextmanager


@contextmanager
def session_scope():
    """Session committed on success, rolled back on any error."""
    from database import SessionLocal

    db = SessionLocal()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def init_db():
    """Initialize the database."""
    from database import init_db as db_init

    print("Initializing database...")
    db_init()
    print("Database initialized successfully!")


def list_baskets():
    """Print all basket names."""
    from services import operations

    with session_scope() as db:
        for name in operations.list_basket_names(db):
            print(name)


def dump_basket(name: str):
    """Print the JSON dump of the objects covered by a basket."""
    from services import operations, SqlObjectRepository

    with session_scope() as db:
        print(operations.dump(db, name, SqlObjectRepository(db)))


def snapshot_basket(name: str):
    """Take and store a snapshot of a basket."""
    from services import operations, SqlObjectRepository

    with session_scope() as db:
        snapshot = operations.take_snapshot(db, name, SqlObjectRepository(db))
        print(
            f"Snapshot '{snapshot.checksum_hex[:7]}' taken for Basket '{name}' "
            f"at {snapshot.created_at.strftime('%Y-%m-%d %H:%M:%S')}"
        )


def list_snapshots(name: str):
    """List the stored snapshots of a basket, newest first."""
    from services import baskets, snapshots

    with session_scope() as db:
        basket = baskets.load_basket(db, name)
        rows = snapshots.list_snapshots(db, basket)

        if not rows:
            print(f"No snapshots for Basket '{name}'.")
            return

        print(f"\nSnapshots of Basket '{name}' ({len(rows)}):")
        print("-" * 60)
        for snapshot in rows:
            summary = snapshot.content.summary
            objects = ", ".join(f"{count} {type_name}" for type_name, count in summary.items() if count)
            print(f"  {snapshot.checksum_hex[:7]}  {snapshot.created_at.strftime('%Y-%m-%d %H:%M:%S')}")
            print(f"    {objects or 'empty'}")


def restore_baskets(json_str: str, purge: str = None, force: bool = False):
    """Restore objects from a basket dump, optionally purging others."""
    from services import operations, SqlObjectRepository

    purge_types = [t.strip() for t in purge.split(",") if t.strip()] if purge else []

    with session_scope() as db:
        outcome = operations.restore(
            db, json_str, SqlObjectRepository(db), purge_types=purge_types, force=force
        )

    for type_name, deleted in outcome.purged.items():
        if deleted:
            print(f"Purged {len(deleted)} {type_name} object(s)")
    print("Objects from Basket Snapshot have been restored")


def upload_basket(name: str, json_str: str):
    """Upload a basket dump as a new snapshot."""
    from services import operations

    with session_scope() as db:
        outcome = operations.upload(db, name, json_str)

    if outcome.created:
        print(f"Created Basket '{name}'.")
    print("Basket snapshot has been uploaded")


def run_server(host: str = "0.0.0.0", port: int = 8000, reload: bool = False):
    """Run the FastAPI server."""
    import uvicorn
    uvicorn.run(
        "api.main:app",
        host=host,
        port=port,
        reload=reload
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Config Baskets CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # init-db
    subparsers.add_parser("init-db", help="Initialize the database")

    # list
    subparsers.add_parser("list", help="List configured baskets")

    # dump
    dump_parser = subparsers.add_parser("dump", help="JSON dump of the objects of a basket")
    dump_parser.add_argument("--name", required=True, help="Basket name")

    # snapshot
    snapshot_parser = subparsers.add_parser("snapshot", help="Take a snapshot of a basket")
    snapshot_parser.add_argument("--name", required=True, help="Basket name")

    # snapshots
    snapshots_parser = subparsers.add_parser("snapshots", help="List snapshots of a basket")
    snapshots_parser.add_argument("--name", required=True, help="Basket name")

    # restore
    restore_parser = subparsers.add_parser(
        "restore",
        help="Restore objects from a basket dump on STDIN",
        description=(
            "Restore objects from a basket dump provided on STDIN.\n\n"
            "WARNING: --purge removes ALL objects of the given types that\n"
            "are not shipped with the given basket."
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter
    )
    restore_parser.add_argument(
        "--purge", metavar="TYPE[,TYPE]", help="Purge objects of the given types"
    )
    restore_parser.add_argument(
        "--force", action="store_true",
        help="Purge even when the basket ships no objects of a purged type"
    )

    # upload
    upload_parser = subparsers.add_parser("upload", help="Upload a basket dump on STDIN as snapshot")
    upload_parser.add_argument("--name", required=True, help="Basket name")

    # serve
    serve_parser = subparsers.add_parser("serve", help="Run the API server")
    serve_parser.add_argument("--host", default="0.0.0.0", help="Host to bind to")
    serve_parser.add_argument("--port", type=int, default=8000, help="Port to listen on")
    serve_parser.add_argument("--reload", action="store_true", help="Enable auto-reload")

    return parser


def main(argv=None):
    from config import settings
    from core import BasketError

    logging.basicConfig(
        level=logging.DEBUG if settings.DEBUG else getattr(logging, settings.LOG_LEVEL.upper(), logging.WARNING),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return

    try:
        if args.command == "init-db":
            init_db()
        elif args.command == "list":
            list_baskets()
        elif args.command == "dump":
            dump_basket(args.name)
        elif args.command == "snapshot":
            snapshot_basket(args.name)
        elif args.command == "snapshots":
            list_snapshots(args.name)
        elif args.command == "restore":
            restore_baskets(sys.stdin.read(), args.purge, args.force)
        elif args.command == "upload":
            upload_basket(args.name, sys.stdin.read())
        elif args.command == "serve":
            run_server(args.host, args.port, args.reload)
    except BasketError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
