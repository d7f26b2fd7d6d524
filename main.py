"""Development entrypoint for the Hexwar HTTP API."""

from __future__ import annotations

import argparse
import logging
import os

import uvicorn

from hexwar.config import get_settings


def main() -> None:
    parser = argparse.ArgumentParser(description="Run the Hexwar API server")
    parser.add_argument("--host", default="127.0.0.1", help="Host interface to bind")
    parser.add_argument("--port", type=int, default=8000, help="TCP port to listen on")
    parser.add_argument(
        "--storage",
        choices=["memory", "json", "sql"],
        help="Override HEXWAR_STORAGE_BACKEND for this run",
    )
    parser.add_argument("--dice-seed", help="Make combat dice reproducible from this seed")
    parser.add_argument(
        "--reload",
        action="store_true",
        help="Enable autoreload (dev mode)",
    )
    args = parser.parse_args()

    # The app factory may run in a reloader subprocess; it only sees the environment.
    if args.storage:
        os.environ["HEXWAR_STORAGE_BACKEND"] = args.storage
    if args.dice_seed:
        os.environ["HEXWAR_DICE_SEED"] = args.dice_seed

    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logging.getLogger(__name__).info(
        "serving hexwar on %s:%d (storage: %s)", args.host, args.port, settings.storage_backend
    )

    uvicorn.run(
        "hexwar.api.app:create_app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        factory=True,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
