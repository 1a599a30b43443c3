"""Command-line interface for gh-wt"""

import sys
from typing import List, Optional

from rich.markup import escape

from gh_wt.cli.args import build_parser, parse_args
from gh_wt.cli.commands import WorktreeCommands, is_interactive_terminal
from gh_wt.config import load_config
from gh_wt.exceptions import GhWtError, OperationCancelled
from gh_wt.logging_config import setup_logging
from gh_wt.utils.console import console, disable_color


def _uses_tui(args) -> bool:
    return args.command == "list" and not args.plain and is_interactive_terminal()


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the application."""
    debug = False
    try:
        # Parse command line arguments
        parsed_args, cli_args = parse_args(argv)
        debug = parsed_args.debug

        if parsed_args.no_color:
            disable_color()

        # The TUI hides console output, so its logs go to the log file
        setup_logging(
            verbose=parsed_args.verbose,
            debug=parsed_args.debug,
            tui_mode=_uses_tui(parsed_args),
            use_color=not parsed_args.no_color,
        )

        if parsed_args.command is None:
            build_parser().print_help()
            return 0

        config = load_config(
            parsed_args.config,
            force=parsed_args.force or None,
            verbose=parsed_args.verbose or None,
            debug=parsed_args.debug or None,
        )

        if parsed_args.debug:
            console.print("[yellow]Debug mode enabled[/yellow]")
            console.print("[yellow]Configuration:[/yellow]")
            for key, value in config.to_dict().items():
                if key == "github_token" and value:
                    value = "***"
                console.print(f"  {key}: {escape(str(value))}")
            if cli_args:
                console.print(f"  CLI_ARGS: {escape(cli_args)}")

        return WorktreeCommands(config, cli_args).dispatch(parsed_args)
    except OperationCancelled as e:
        console.print(f"[yellow]{escape(str(e))}[/yellow]")
        return 0
    except KeyboardInterrupt:
        console.print("\n[yellow]Operation cancelled by user[/yellow]")
        return 1
    except GhWtError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        if e.rollback_error is not None:
            console.print(f"[yellow]{escape(str(e.rollback_error))}[/yellow]")
        if debug:
            console.print_exception()
        return 1
    except Exception as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        if debug:
            console.print_exception()
        return 1


if __name__ == "__main__":
    sys.exit(main())
