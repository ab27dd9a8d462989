"""Run the lead desk with ``python -m lead_desk``."""
from __future__ import annotations

import sys

from . import cli

PROG = "python -m lead_desk"


def main(argv: list[str] | None = None) -> int:
    """Dispatch to the lead desk CLI, listing the subcommands when none is given."""

    args = sys.argv[1:] if argv is None else list(argv)
    if args:
        return cli.main(args)

    cli.build_parser(prog=PROG).print_help()
    return 2


if __name__ == "__main__":  # pragma: no cover - module entry point
    sys.exit(main())
