from typing import Callable, List, Mapping, Optional

from rich.console import Console

from .errors import UnresolvedProjectError
from .gcloud import UNSET_PROJECT, GcloudClient
from .picker import ProjectPicker
from .settings import WrapperSettings

PROJECT_ENV_VAR = "ANTHROPIC_VERTEX_PROJECT_ID"

ProjectLookup = Callable[[], Optional[str]]


def is_usable_project(project_id: Optional[str]) -> bool:
    return bool(project_id) and project_id != UNSET_PROJECT


class ProjectResolver:
    """Finds the project to run against.

    Sources are tried in order and the first usable value wins:

    1. the project id baked into the settings,
    2. the ``ANTHROPIC_VERTEX_PROJECT_ID`` environment variable,
    3. the project gcloud is currently configured with,
    4. an interactive pick among the account's projects.
    """

    def __init__(
        self,
        settings: WrapperSettings,
        environ: Mapping[str, str],
        gcloud: GcloudClient,
        picker: ProjectPicker,
        console: Console,
    ):
        self.settings = settings
        self.environ = environ
        self.gcloud = gcloud
        self.picker = picker
        self.console = console

    def from_settings(self) -> Optional[str]:
        return self.settings.project_id

    def from_environment(self) -> Optional[str]:
        return self.environ.get(PROJECT_ENV_VAR) or None

    def from_gcloud_config(self) -> Optional[str]:
        project_id = self.gcloud.get_project()
        if is_usable_project(project_id):
            self.console.print(f"Using configured project: {project_id}")
            return project_id
        return None

    def from_picker(self) -> Optional[str]:
        return self.picker.select()

    def lookups(self) -> List[ProjectLookup]:
        return [
            self.from_settings,
            self.from_environment,
            self.from_gcloud_config,
            self.from_picker,
        ]

    def preset(self) -> Optional[str]:
        """The project given ahead of time, without asking gcloud or the user."""
        return self._first_usable([self.from_settings, self.from_environment])

    def resolve(self, lookups: Optional[List[ProjectLookup]] = None) -> str:
        project_id = self._first_usable(lookups if lookups is not None else self.lookups())
        if project_id is None:
            raise UnresolvedProjectError(
                "No project configured. Please reset your gcloud config and try again."
            )
        return project_id

    @staticmethod
    def _first_usable(lookups: List[ProjectLookup]) -> Optional[str]:
        for lookup in lookups:
            project_id = lookup()
            if is_usable_project(project_id):
                return project_id
        return None
