#!/usr/bin/env python3

import argparse
import argcomplete
import os
import sys

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, List, Optional

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .bootstrap import SessionBootstrapper
from .build import (
    DEFAULT_OUTPUT,
    check_launcher,
    planned_exports,
    render_launcher,
    write_launcher,
)
from .errors import WrapperError
from .launcher import launch
from .settings import WrapperSettings, load_settings


_available_commands: List["Command"] = []


def run_wrapper(settings: WrapperSettings, argv: Optional[List[str]] = None) -> int:
    """
    Authenticates, resolves the project and hands over to Claude Code.

    Every argument is forwarded untouched; the wrapper has no flags of its own.
    Only returns on failure, since a successful launch replaces this process.
    """
    if argv is None:
        argv = sys.argv[1:]

    console = Console(stderr=True)
    try:
        plan = SessionBootstrapper(settings, os.environ, console).prepare(argv)
        launch(plan, console)
    except WrapperError as e:
        console.print(f"[bold red]Error:[/] {escape(str(e))}", highlight=False)
        return 1
    except KeyboardInterrupt:
        return 130
    return 0


def main():
    """Entry point of the `claude-vertex` script, running with the default settings."""
    sys.exit(run_wrapper(WrapperSettings(), sys.argv[1:]))


##############################################################################


@dataclass
class Argument(ABC):
    def __init__(self, help: str, kwargs: Optional[dict] = None):
        self.help = help
        self.kwargs = kwargs if kwargs is not None else {}

    @abstractmethod
    def add_to_parser(self, parser: argparse.ArgumentParser):
        pass


class OptionalArg(Argument):
    def __init__(
        self,
        long_option: str,
        help: str,
        short_option: Optional[str] = None,
        kwargs: Optional[dict] = None,
    ):
        super().__init__(help=help, kwargs=kwargs)
        self.short_option = short_option
        self.long_option = long_option

    def add_to_parser(self, parser: argparse.ArgumentParser):
        flags = [self.short_option, self.long_option] if self.short_option else [self.long_option]
        parser.add_argument(*flags, help=self.help, **self.kwargs)


class PositionalArg(Argument):
    def __init__(self, name: str, help: str, kwargs: Optional[dict] = None):
        super().__init__(help=help, kwargs=kwargs)
        self.name = name

    def add_to_parser(self, parser: argparse.ArgumentParser):
        parser.add_argument(self.name, help=self.help, **self.kwargs)


@dataclass
class Command:
    name: str
    func: Callable
    help: str
    description: str
    args: list[Argument]


def command(args: List[Argument]):
    def decorator(func):
        if not func.__name__.startswith("handle_"):
            raise ValueError("Command handler must start with 'handle_'.")

        if not func.__doc__:
            raise ValueError(
                f"Command handler '{func.__name__}' must have a docstring for its help text."
            )

        command_name = func.__name__.split("_")[1]
        help_text = func.__doc__.strip().split("\n")[0]
        _available_commands.append(
            Command(command_name, func, help_text, func.__doc__, args)
        )
        return func

    return decorator


SETTINGS_ARGS: List[Argument] = [
    OptionalArg(
        short_option="-c",
        long_option="--config",
        help="JSON file with modelName, smallModelName, vertexRegion, disablePromptCaching and projectId.",
    ),
    OptionalArg(
        short_option="-m",
        long_option="--model",
        help="The primary Claude model (ANTHROPIC_MODEL).",
    ),
    OptionalArg(
        short_option="-s",
        long_option="--small-model",
        help="The fast model for lightweight tasks (ANTHROPIC_SMALL_FAST_MODEL).",
    ),
    OptionalArg(
        short_option="-r",
        long_option="--region",
        help="Google Cloud region for Vertex AI (CLOUD_ML_REGION).",
    ),
    OptionalArg(
        short_option="-p",
        long_option="--project-id",
        help="Hardcoded Google Cloud project. Takes precedence over every other source.",
    ),
    OptionalArg(
        long_option="--enable-prompt-caching",
        help="Keep prompt caching on (DISABLE_PROMPT_CACHING is not exported).",
        kwargs={"action": "store_true"},
    ),
    OptionalArg(
        long_option="--no-model",
        help="Do not export ANTHROPIC_MODEL.",
        kwargs={"action": "store_true"},
    ),
    OptionalArg(
        long_option="--no-small-model",
        help="Do not export ANTHROPIC_SMALL_FAST_MODEL.",
        kwargs={"action": "store_true"},
    ),
    OptionalArg(
        long_option="--no-region",
        help="Do not export CLOUD_ML_REGION.",
        kwargs={"action": "store_true"},
    ),
]


def _settings_from_args(args) -> WrapperSettings:
    # Flags override the config file, which overrides the defaults.
    settings = load_settings(args.config) if args.config else WrapperSettings()

    changes = {}
    if args.model is not None:
        changes["model_name"] = args.model
    if args.small_model is not None:
        changes["small_model_name"] = args.small_model
    if args.region is not None:
        changes["vertex_region"] = args.region
    if args.project_id is not None:
        changes["project_id"] = args.project_id
    if args.enable_prompt_caching:
        changes["disable_prompt_caching"] = False
    if args.no_model:
        changes["model_name"] = None
    if args.no_small_model:
        changes["small_model_name"] = None
    if args.no_region:
        changes["vertex_region"] = None

    return settings.replace(**changes)


def _confirm(message: str) -> bool:
    try:
        return input(f"{message} [y/N] ").lower() == "y"
    except (KeyboardInterrupt, EOFError):
        return False


##############################################################################


@command(
    SETTINGS_ARGS
    + [
        OptionalArg(
            short_option="-o",
            long_option="--output",
            help=f"Where to write the launcher. Defaults to {DEFAULT_OUTPUT}.",
            kwargs={"default": DEFAULT_OUTPUT},
        ),
        OptionalArg(
            short_option="-f",
            long_option="--force",
            help="Overwrite an existing launcher without asking.",
            kwargs={"action": "store_true"},
        ),
    ]
)
def handle_build(args):
    """Builds a Claude Code launcher with the given settings baked in.
    The launcher authenticates with Google Cloud, resolves the project and starts Claude Code on Vertex AI.
    """
    settings = _settings_from_args(args)
    console = Console()

    if os.path.exists(args.output) and not args.force:
        if not _confirm(f"'{args.output}' already exists. Overwrite?"):
            console.print("Aborted. The launcher was not overwritten.")
            return

    write_launcher(render_launcher(settings), args.output)
    console.print(f"[green]✓ Wrote launcher:[/] {args.output}")


@command(SETTINGS_ARGS)
def handle_show(args):
    """Shows the environment a launcher with the given settings would export."""
    settings = _settings_from_args(args)

    table = Table(title="Vertex AI environment")
    table.add_column("Variable", style="cyan")
    table.add_column("Value")
    for name, value in planned_exports(settings):
        table.add_row(name, value)

    Console().print(table)


@command(
    [
        PositionalArg(
            name="launcher",
            help="Path to a launcher written by `build`.",
        ),
        OptionalArg(
            short_option="-e",
            long_option="--expect",
            help="Text that must appear in the launcher. Can be repeated.",
            kwargs={"action": "append", "default": []},
        ),
        OptionalArg(
            short_option="-a",
            long_option="--absent",
            help="Text that must not appear in the launcher. Can be repeated.",
            kwargs={"action": "append", "default": []},
        ),
    ]
)
def handle_check(args):
    """Verifies that a built launcher carries the expected settings."""
    with open(args.launcher, "r", encoding="utf-8") as f:
        content = f.read()

    console = Console()
    for description, passed in check_launcher(content, args.expect, args.absent):
        if passed:
            console.print(f"[green]PASS:[/] {description}", highlight=False)
        else:
            console.print(f"[red]FAIL:[/] {description}", highlight=False)
            sys.exit(1)

    console.print("All checks passed")


##############################################################################


def run_build_cli(argv: Optional[List[str]] = None):
    """
    Parses command-line arguments and executes the corresponding build command.

    Args:
        argv: A list of strings representing the command-line arguments.
              If None, `sys.argv[1:]` is used automatically by `parse_args`.
    """
    parser = argparse.ArgumentParser(
        description="Build and inspect Claude Code launchers that run on Google Cloud Vertex AI."
    )
    subparsers = parser.add_subparsers(
        dest="command", help="Sub-commands", required=True
    )

    # Sort commands alphabetically for consistent --help output.
    _available_commands.sort(key=lambda cmd: cmd.name)

    for command in _available_commands:
        subparser = subparsers.add_parser(
            command.name, help=command.help, description=command.description
        )
        for arg in command.args:
            arg.add_to_parser(subparser)
        subparser.set_defaults(func=command.func)

    # Enable argument auto-completion.
    argcomplete.autocomplete(parser)

    args = parser.parse_args(argv)
    try:
        args.func(args)
    except (WrapperError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


def build_main():
    """Entry point of the `claude-vertex-build` script."""
    run_build_cli()


if __name__ == "__main__":
    main()
