from __future__ import annotations

import argparse
import asyncio
import sys
from textwrap import dedent

__all__ = ["cli"]

# ---------------------------------------------------------------------------+
#  Minimal CLI parser                                                         +
# ---------------------------------------------------------------------------+


def _build_parser() -> argparse.ArgumentParser:  # noqa: D401 – imperative style
    """Return a parser that understands ``--help``, ``--version`` and ``--log-level``.

    discord.py is only imported once the flags are parsed, so ``--help``
    stays fast.
    """
    from modhost import __version__

    parser = argparse.ArgumentParser(
        prog="python -m modhost.core",
        add_help=False,
        formatter_class=argparse.RawDescriptionHelpFormatter,
        description=dedent(
            """\
            Module host bootstrap
            ---------------------
            Run *without arguments* to publish every feature in
            FEATURES_PACKAGE and connect using DISCORD_TOKEN.
            """
        ),
    )
    parser.add_argument("-h", "--help", action="help", help="show this message and exit")
    parser.add_argument(
        "-V", "--version", action="version", version=f"%(prog)s {__version__}"
    )
    parser.add_argument("--log-level", default=None, help="root log level (LOG_LEVEL wins)")
    return parser


# ---------------------------------------------------------------------------+
#  Public entry-point                                                        +
# ---------------------------------------------------------------------------+


def cli(argv: list[str] | None = None) -> None:  # noqa: D401
    """Entry-point for ``python -m modhost.core``."""

    args, _ = _build_parser().parse_known_args(argv)  # exits on -h/-V automatically

    from modhost.core.logger_setup import setup_logging

    setup_logging(level=args.log_level)
    from modhost.core.main import main  # delayed import keeps --help fast

    asyncio.run(main())


if __name__ == "__main__":  # pragma: no cover
    try:
        cli(sys.argv[1:])
    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        sys.exit(130)
