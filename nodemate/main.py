#!/usr/bin/env python3
"""
NodeMate command line entry point.

    nodemate                  first-run wizard, or the welcome text
    nodemate chat             interactive chat session
    nodemate config [--show]  configure the AI provider / show settings
"""

import argparse
import asyncio
import logging
import sys
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import ValidationError as PydanticValidationError

from nodemate import __version__
from nodemate.agent.session import ChatSession
from nodemate.commands.config_wizard import ConfigWizard, show_config
from nodemate.config.settings import Settings, get_settings
from nodemate.config.store import ConfigStore
from nodemate.exceptions import MissingConfigError, NodeMateError
from nodemate.ui.common import error_hint
from nodemate.ui.input import InputManager
from nodemate.ui.messages import FIRST_TIME_SETUP, WELCOME_MESSAGE
from nodemate.ui.presenter import Presenter
from nodemate.utils.logging_setup import setup_logging

logger = logging.getLogger("nodemate")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="nodemate",
        description="AI-powered CLI assistant for Node.js package management",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--debug", action="store_true", help="Write a debug log to the config directory"
    )

    subparsers = parser.add_subparsers(dest="command")
    subparsers.add_parser("chat", help="Start interactive chat mode")
    config_parser = subparsers.add_parser(
        "config", help="Configure NodeMate with your AI provider"
    )
    config_parser.add_argument(
        "--show", action="store_true", help="Show the current configuration"
    )
    return parser


def load_settings(debug: bool) -> Settings:
    if debug:
        return Settings(debug=True)
    return get_settings()


async def run_chat(settings: Settings, store: ConfigStore, presenter: Presenter) -> int:
    if not store.has_config():
        presenter.error(MissingConfigError().message)
        return 1

    session = ChatSession(
        presenter=presenter,
        input_manager=InputManager(),
        config_store=store,
        settings=settings,
    )
    await session.run()
    return 0


async def run_config(
    settings: Settings, store: ConfigStore, presenter: Presenter, show: bool = False
) -> int:
    if show:
        return 0 if show_config(store, presenter) else 1
    wizard = ConfigWizard(
        store, presenter, InputManager(), validation_timeout=settings.request_timeout
    )
    saved = await wizard.run()
    return 0 if saved else 1


async def run_default(settings: Settings, store: ConfigStore, presenter: Presenter) -> int:
    if not store.has_config():
        presenter.print(FIRST_TIME_SETUP)
        return await run_config(settings, store, presenter)

    presenter.print(WELCOME_MESSAGE)
    presenter.info(
        'Configuration found. Use "nodemate chat" to start or "nodemate --help" for more options.'
    )
    return 0


async def dispatch(args: argparse.Namespace, settings: Settings) -> int:
    store = ConfigStore(settings.config_file)
    color = store.get_config().preferences.color_output
    presenter = Presenter(color=color)

    if args.command == "chat":
        return await run_chat(settings, store, presenter)
    if args.command == "config":
        return await run_config(settings, store, presenter, show=args.show)
    return await run_default(settings, store, presenter)


def main(argv: Optional[List[str]] = None) -> int:
    load_dotenv()
    args = build_parser().parse_args(argv)

    try:
        settings = load_settings(args.debug)
    except (NodeMateError, PydanticValidationError) as e:
        print(f"❌ Settings Error: {e}", file=sys.stderr)
        return 1

    setup_logging(settings)
    logger.debug("NodeMate %s starting (command=%s)", __version__, args.command)

    try:
        return asyncio.run(dispatch(args, settings))
    except NodeMateError as e:
        Presenter().error(e.message, hint=error_hint(e))
        return 1
    except KeyboardInterrupt:
        print("\nInterrupted by user")
        return 130


def run() -> None:
    sys.exit(main())


if __name__ == "__main__":
    run()
