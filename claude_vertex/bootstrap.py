from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional

from rich.console import Console

from .errors import UnresolvedProjectError
from .gcloud import GcloudClient
from .picker import ProjectPicker, require_terminal
from .resolver import PROJECT_ENV_VAR, ProjectResolver, is_usable_project
from .settings import WrapperSettings

USE_VERTEX_VAR = "CLAUDE_CODE_USE_VERTEX"
REGION_VAR = "CLOUD_ML_REGION"
MODEL_VAR = "ANTHROPIC_MODEL"
SMALL_MODEL_VAR = "ANTHROPIC_SMALL_FAST_MODEL"
DISABLE_PROMPT_CACHING_VAR = "DISABLE_PROMPT_CACHING"

# Variables that should never end up empty in the launched environment.
EXPECTED_VARS = (MODEL_VAR, SMALL_MODEL_VAR, REGION_VAR)


@dataclass
class LaunchPlan:
    """Everything the launcher needs: the final environment and the args to forward."""

    project_id: str
    exports: Dict[str, str]
    environment: Dict[str, str]
    args: List[str] = field(default_factory=list)


def export_variables(settings: WrapperSettings, project_id: Optional[str]) -> "OrderedDict[str, str]":
    """Builds the variables to export, in the order they are applied.

    Unset settings are left out entirely rather than exported empty.
    """
    exports = OrderedDict()
    exports[USE_VERTEX_VAR] = "1"
    exports[PROJECT_ENV_VAR] = project_id if project_id is not None else ""
    if settings.vertex_region is not None:
        exports[REGION_VAR] = settings.vertex_region
    if settings.model_name is not None:
        exports[MODEL_VAR] = settings.model_name
    if settings.small_model_name is not None:
        exports[SMALL_MODEL_VAR] = settings.small_model_name
    if settings.disable_prompt_caching:
        exports[DISABLE_PROMPT_CACHING_VAR] = "1"
    return exports


def build_environment(
    settings: WrapperSettings, project_id: str, environ: Mapping[str, str]
) -> Dict[str, str]:
    environment = dict(environ)
    environment.update(export_variables(settings, project_id))
    if not settings.disable_prompt_caching:
        environment.pop(DISABLE_PROMPT_CACHING_VAR, None)
    return environment


def missing_variables(environment: Mapping[str, str]) -> List[str]:
    return [name for name in EXPECTED_VARS if not environment.get(name)]


class SessionBootstrapper:
    """Authenticates with gcloud, settles on a project and prepares the launch."""

    def __init__(
        self,
        settings: WrapperSettings,
        environ: Mapping[str, str],
        console: Console,
        gcloud: Optional[GcloudClient] = None,
        picker: Optional[ProjectPicker] = None,
    ):
        self.settings = settings
        self.environ = environ
        self.console = console
        self.gcloud = gcloud if gcloud is not None else GcloudClient()
        self.picker = picker if picker is not None else ProjectPicker(self.gcloud, console)
        self.resolver = ProjectResolver(
            settings, environ, self.gcloud, self.picker, console
        )

    def first_time_login(self) -> str:
        require_terminal("Google Cloud login")
        self.console.print("Authentication required. Opening browser...")
        self.gcloud.login()
        self.gcloud.application_default_login()

        # No earlier project context is trusted after a fresh login.
        project_id = self.picker.select()

        self.gcloud.set_project(project_id)
        self.gcloud.enable_service()
        return project_id

    def resolve_project(self) -> str:
        project_id = self.resolver.preset()

        if not self.gcloud.is_authenticated():
            return self.first_time_login()

        if project_id is None:
            self.console.print("Already authenticated with Google Cloud.")
            project_id = self.resolver.resolve(
                [self.resolver.from_gcloud_config, self.resolver.from_picker]
            )
        return project_id

    def prepare(self, args: List[str]) -> LaunchPlan:
        project_id = self.resolve_project()
        if not is_usable_project(project_id):
            raise UnresolvedProjectError(
                "No project configured. Please reset your gcloud config and try again."
            )

        environment = build_environment(self.settings, project_id, self.environ)
        missing = missing_variables(environment)
        if missing:
            self.console.print(
                f"[yellow]Warning: missing the model, small model or region ({', '.join(missing)})[/]"
            )

        return LaunchPlan(
            project_id=project_id,
            exports=dict(export_variables(self.settings, project_id)),
            environment=environment,
            args=list(args),
        )
