import argparse
import sys

from typing import Optional, Sequence

from rich.console import Console

from posrunner.app import Launcher
from posrunner.config import Config
from posrunner.errors import CatalogLookupFailure, ConfigDataDefect, ExternalProcessFailure, UserCancellation
from posrunner.logger import logger
from posrunner.ui import Picker
from posrunner.utils import Timer

console = Console()

def parse_args(argv: Optional[Sequence[str]] = None):
    parser = argparse.ArgumentParser(
        prog="posrunner",
        description="Pick payment terminal test cases and run them with the right cards and merchant."
    )
    parser.add_argument("path", help="Root path of the test suite")
    parser.add_argument("--config", default="config.toml", help="TOML configuration file")
    parser.add_argument("--dry-run", action="store_true", help="Show the planned commands without running them")

    return parser.parse_args(argv)

def main(argv: Optional[Sequence[str]] = None, picker=None) -> int:
    args = parse_args(argv)

    try:
        config = Config(args.config)
        launcher = Launcher(config, args.path, picker or Picker(console))

        with Timer(f"Run of {args.path}"):
            return launcher.run(dry_run=args.dry_run)

    except UserCancellation as e:
        logger.info(f"Cancelled: {e}")
        return 0

    except ConfigDataDefect as e:
        console.print(f"[bold red]{e}[/bold red]")
        return 0

    except (CatalogLookupFailure, ExternalProcessFailure, FileNotFoundError, ValueError) as e:
        logger.error(str(e))
        return 1

if __name__ == "__main__":
    sys.exit(main())
