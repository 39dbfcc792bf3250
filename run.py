import argparse
import sys

from memory_helper.config import ClientConfig
from memory_helper.exceptions import MemoryHelperError
from memory_helper.logger import setup_logger


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Memory Helper - recognise the people around you"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    client = subparsers.add_parser("client", help="Open the camera and show who is in front of it")
    client.add_argument("--camera", type=int, default=None, help="Webcam index")
    client.add_argument("--base-url", default=None, help="Base URL of the recognize/summary service")
    client.add_argument("--interval", type=float, default=None, help="Seconds between sampled frames")
    client.add_argument("--cooldown", type=float, default=None, help="Seconds before the same person shows again")

    serve = subparsers.add_parser("serve", help="Run the recognize/summary backend")
    serve.add_argument("--host", default="0.0.0.0", help="Host interface")
    serve.add_argument("--port", type=int, default=9000, help="Port")

    subparsers.add_parser("seed-demo", help="Insert the demo people into the backend database")

    list_cmd = subparsers.add_parser("list-people", help="List people known to the backend")
    list_cmd.add_argument("--limit", type=int, default=100, help="Max rows to print")

    return parser


def _client_config(args: argparse.Namespace) -> ClientConfig:
    cfg = ClientConfig.from_env()
    if args.camera is not None:
        cfg.camera_index = args.camera
    if args.base_url:
        cfg.base_url = args.base_url.rstrip("/")
    if args.interval is not None:
        cfg.sample_interval_seconds = max(0.1, args.interval)
    if args.cooldown is not None:
        cfg.cooldown_seconds = max(0.0, args.cooldown)
    return cfg


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logger = setup_logger("main")

    try:
        if args.command == "client":
            from memory_helper.app import MemoryHelperApp

            MemoryHelperApp(_client_config(args)).run()
            print("Memory helper stopped.")
            return 0

        if args.command == "serve":
            import uvicorn

            from memory_backend.main import app

            uvicorn.run(app, host=args.host, port=args.port, log_level="info")
            return 0

        if args.command == "seed-demo":
            from memory_backend.db.session import init_db

            added = init_db(seed_demo=True)
            print(f"Added {added} demo people.")
            return 0

        if args.command == "list-people":
            from sqlalchemy import select

            from memory_backend.db.models import Person
            from memory_backend.db.session import SessionLocal, init_db

            init_db()
            with SessionLocal() as db:
                records = db.scalars(select(Person).order_by(Person.name).limit(args.limit)).all()
            if not records:
                print("No people registered.")
                return 0

            print(f"{'Person ID':<38} {'Name':<24} {'Relationship'}")
            print("-" * 80)
            for record in records:
                print(f"{record.id:<38} {record.name:<24} {record.relationship}")
            return 0

    except MemoryHelperError as exc:
        logger.error("Application error: %s", exc)
        print(f"Error: {exc}")
        return 1
    except KeyboardInterrupt:
        print("\nStopped by user.")
        return 0
    except Exception as exc:
        logger.exception("Unexpected failure")
        print(f"Unexpected error: {exc}")
        return 1

    parser.print_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())
