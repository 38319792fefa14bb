import os
import shutil
import sys

from typing import Optional

from rich.console import Console

from .bootstrap import LaunchPlan
from .errors import ExecutableNotFound

WRAPPED_EXECUTABLE = "claude"


def find_wrapped_executable(
    name: str = WRAPPED_EXECUTABLE,
    search_path: Optional[str] = None,
    skip: Optional[str] = None,
) -> str:
    """Finds ``name`` on the search path, ignoring the file at ``skip``.

    The wrapper itself is usually installed as ``claude`` too, so the first
    match on PATH may well be us.
    """
    if search_path is None:
        search_path = os.environ.get("PATH", os.defpath)
    skip_real = os.path.realpath(skip) if skip else None

    for directory in search_path.split(os.pathsep):
        if not directory:
            continue
        candidate = shutil.which(name, path=directory)
        if candidate is None:
            continue
        if skip_real and os.path.realpath(candidate) == skip_real:
            continue
        return candidate

    raise ExecutableNotFound(
        f"Could not find '{name}' in your PATH. Is Claude Code installed?"
    )


def launch(plan: LaunchPlan, console: Console, executable: Optional[str] = None):
    """Replaces the current process with the wrapped executable. Does not return."""
    if executable is None:
        executable = find_wrapped_executable(
            search_path=plan.environment.get("PATH"), skip=sys.argv[0]
        )

    console.print("Launching Claude Code...")
    sys.stdout.flush()
    sys.stderr.flush()
    try:
        os.execve(executable, [WRAPPED_EXECUTABLE, *plan.args], plan.environment)
    except OSError as e:
        raise ExecutableNotFound(f"Could not run '{executable}': {e}") from e
