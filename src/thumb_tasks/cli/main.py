# src/thumb_tasks/cli/main.py

"""
CLI entrypoint.

  thumb-tasks run      one run (for crontab / CI schedulers); JSON result on stdout
  thumb-tasks serve    local dev server exposing /api/cron and /api/whoami
  thumb-tasks whoami   print the bot identity and chat ids seen in pending updates
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys

from ..config import get_settings
from ..core.errors import ConfigError
from ..logging_setup import setup_logging
from .bootstrap import run_once, whoami

logger = logging.getLogger(__name__)


def _print_json(payload: object) -> None:
    print(json.dumps(payload, ensure_ascii=False, indent=2))


def _cmd_run(settings) -> int:
    try:
        result = asyncio.run(run_once(settings))
    except ConfigError as e:
        logger.error("%s", e)
        _print_json({"ok": False, "error": str(e)})
        return 2
    _print_json(result.to_dict())
    return 0 if result.ok else 1


def _cmd_whoami(settings) -> int:
    try:
        payload = asyncio.run(whoami(settings))
    except ConfigError as e:
        logger.error("%s", e)
        _print_json({"ok": False, "error": str(e)})
        return 2
    _print_json(payload)
    return 0


def _cmd_serve(settings, host: str, port: int | None) -> int:
    import uvicorn

    from ..web.app import create_app

    port = port or settings.port
    logger.info("Local server ready at http://%s:%d", host, port)
    uvicorn.run(create_app(settings), host=host, port=port, log_config=None)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="thumb-tasks", description="Turn a private Telegram chat into a task list.")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("run", help="Drain updates, update the ledger and send the report once.")

    serve = sub.add_parser("serve", help="Run the local dev server.")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=None, help="Defaults to PORT or 3000.")

    sub.add_parser("whoami", help="Show the bot identity and recent chat ids.")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    settings = get_settings()

    level_name = str(getattr(settings, "log_level", "INFO")).upper()
    console_level = getattr(logging, level_name, logging.INFO)
    setup_logging(log_dir=settings.log_dir, console_level=console_level)

    logger.info("Starting %s %s...", settings.app_name, args.command)

    if args.command == "run":
        return _cmd_run(settings)
    if args.command == "whoami":
        return _cmd_whoami(settings)
    return _cmd_serve(settings, args.host, args.port)


if __name__ == "__main__":
    sys.exit(main())
