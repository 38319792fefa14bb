import subprocess
import sys

from typing import Dict, List

from rich.console import Console

from .errors import (
    InteractiveTerminalRequired,
    NoProjectsError,
    ProjectSelectionCancelled,
)
from .gcloud import GcloudClient


def format_project(project: Dict) -> str:
    return f"{project.get('projectId', '')} - {project.get('name', '')}"


def require_terminal(action: str):
    if not sys.stdin.isatty():
        raise InteractiveTerminalRequired(
            f"{action} needs an interactive terminal. Run it from a terminal, or set "
            "ANTHROPIC_VERTEX_PROJECT_ID and authenticate with gcloud beforehand."
        )


def _project_id_from_line(line: str) -> str:
    return line.strip().split(" ", 1)[0]


def _fuzzy_select(lines: List[str], fzf: str = "fzf") -> str:
    """Hands the candidate lines to fzf and returns the chosen line."""
    try:
        # fzf draws its UI on the terminal directly; candidates come in on
        # stdin and the choice comes back on stdout.
        result = subprocess.run(
            [fzf],
            input="\n".join(lines) + "\n",
            stdout=subprocess.PIPE,
            text=True,
        )
    except OSError as e:
        raise ProjectSelectionCancelled(
            f"Could not run '{fzf}' ({e}). Install fzf or configure a project with 'gcloud config set project'."
        ) from e

    selected = result.stdout.strip()
    if result.returncode != 0 or not selected:
        raise ProjectSelectionCancelled("No project selected.")
    return selected


class ProjectPicker:
    def __init__(self, gcloud: GcloudClient, console: Console, fzf: str = "fzf"):
        self.gcloud = gcloud
        self.console = console
        self.fzf = fzf

    def list_choices(self) -> List[str]:
        self.console.print("Fetching available Google Cloud projects...")
        # Entries without an id cannot be selected.
        return [
            format_project(p)
            for p in self.gcloud.list_projects()
            if isinstance(p, dict) and p.get("projectId")
        ]

    def select(self) -> str:
        """Returns a project id picked from the account's projects.

        A single project is taken without prompting. Listing failures and an
        empty list are fatal.
        """
        choices = self.list_choices()

        if not choices:
            raise NoProjectsError(
                "No Google Cloud projects found. Please create a project first."
            )

        if len(choices) == 1:
            project_id = _project_id_from_line(choices[0])
            self.console.print(f"Using only available project: {project_id}")
            return project_id

        require_terminal("Project selection")
        self.console.print("Select a Google Cloud project:")
        project_id = _project_id_from_line(_fuzzy_select(choices, self.fzf))
        self.console.print(f"Selected project: {project_id}")
        return project_id
