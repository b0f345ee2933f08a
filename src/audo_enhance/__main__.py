"""Run the CLI with ``python -m audo_enhance``."""

import sys

from audo_enhance import cli

if __name__ == "__main__":
    cli.main()
    sys.exit(0)
