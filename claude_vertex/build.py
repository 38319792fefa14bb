import os
import stat
import sys

from typing import List, Optional, Tuple

from .bootstrap import export_variables
from .resolver import PROJECT_ENV_VAR
from .settings import WrapperSettings

DEFAULT_OUTPUT = os.path.join("bin", "claude")
UNRESOLVED_PLACEHOLDER = "<resolved at launch>"

LAUNCHER_TEMPLATE = '''#!{python}
# Claude Code CLI wrapper with Vertex AI integration.
# Generated by claude-vertex-build. Rebuild instead of editing by hand.
#
# Exports:
{exports}
import sys

from claude_vertex.cli import run_wrapper
from claude_vertex.settings import WrapperSettings

SETTINGS = WrapperSettings(
    model_name={model_name!r},
    small_model_name={small_model_name!r},
    vertex_region={vertex_region!r},
    disable_prompt_caching={disable_prompt_caching!r},
    project_id={project_id!r},
)

if __name__ == "__main__":
    sys.exit(run_wrapper(SETTINGS, sys.argv[1:]))
'''


def planned_exports(settings: WrapperSettings) -> List[Tuple[str, str]]:
    """The variables a launch would export, with a placeholder for a runtime project."""
    exports = export_variables(settings, settings.project_id)
    if settings.project_id is None:
        exports[PROJECT_ENV_VAR] = UNRESOLVED_PLACEHOLDER
    return list(exports.items())


def render_launcher(settings: WrapperSettings, python: Optional[str] = None) -> str:
    exports = "\n".join(
        f"#   {name}={value}" for name, value in planned_exports(settings)
    )
    return LAUNCHER_TEMPLATE.format(
        python=python or sys.executable,
        exports=exports,
        model_name=settings.model_name,
        small_model_name=settings.small_model_name,
        vertex_region=settings.vertex_region,
        disable_prompt_caching=settings.disable_prompt_caching,
        project_id=settings.project_id,
    )


def write_launcher(content: str, path: str):
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        f.write(content)
    mode = os.stat(path).st_mode
    os.chmod(path, mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)


def check_launcher(
    content: str, expected: List[str], absent: List[str]
) -> List[Tuple[str, bool]]:
    """Checks a rendered launcher for text that must or must not appear.

    Returns one ``(description, passed)`` pair per pattern, stopping after
    the first failure.
    """
    results = []
    for pattern in expected:
        found = pattern in content
        results.append((f"Found {pattern}" if found else f"Missing {pattern}", found))
        if not found:
            return results
    for pattern in absent:
        found = pattern in content
        results.append(
            (f"{pattern} should not be set" if found else f"{pattern} correctly omitted", not found)
        )
        if found:
            return results
    return results
