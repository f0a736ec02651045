"""Entry point for playing a world on the console."""

import argparse
from pathlib import Path

from advtxt import log
from advtxt.game import run
from advtxt.i18n import load_messages
from advtxt.io import ConsoleIO


def run_cli() -> None:
    parser = argparse.ArgumentParser()
    parser.add_argument("--language", default="en")
    parser.add_argument(
        "--world",
        default=None,
        metavar="FILE",
        help="World YAML file (default: the bundled sample world)",
    )
    parser.add_argument(
        "--save",
        default=None,
        metavar="FILE",
        help="Keep players in this YAML file between sessions",
    )
    parser.add_argument("--username", default=None, help="Play as this user instead of asking")
    parser.add_argument(
        "--debug",
        nargs="?",
        const=True,
        metavar="FILE",
        help="Enable debug logging; optionally write the log to FILE instead of STDERR",
    )
    args = parser.parse_args()
    io = ConsoleIO()

    if args.username:
        username = args.username
    else:
        prompt = load_messages(args.language).get("username_prompt", "What is your username? ")
        try:
            username = io.get_input(prompt).strip()
        except (EOFError, KeyboardInterrupt):
            return
        if not username:
            return

    debug_opt = args.debug
    if isinstance(debug_opt, str):  # --debug FILE provided
        with open(Path(debug_opt), "w", encoding="utf-8") as fh:
            log.configure(debug=True, file=fh)
            run(username, args.world, args.language, io, args.save)
    else:
        log.configure(debug=debug_opt is True)
        run(username, args.world, args.language, io, args.save)


if __name__ == "__main__":
    run_cli()
