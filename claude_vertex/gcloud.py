import json
import subprocess

from typing import Dict, List, Optional

from .errors import GcloudError, ProjectListingError

UNSET_PROJECT = "(unset)"
VERTEX_AI_SERVICE = "aiplatform.googleapis.com"


def _cannot_run(executable: str, error: OSError) -> str:
    if isinstance(error, FileNotFoundError):
        return f"'{executable}' not found. Is the Google Cloud SDK installed and in your PATH?"
    return f"Could not run '{executable}': {error}"


class GcloudClient:
    """Runs the handful of gcloud commands the wrapper needs.

    Every call blocks until gcloud exits. Interactive commands (the logins)
    inherit the terminal; everything else is captured.
    """

    def __init__(self, executable: str = "gcloud"):
        self.executable = executable

    def _run(self, *args: str, capture: bool = True) -> str:
        command = [self.executable, *args]
        try:
            if capture:
                result = subprocess.run(
                    command, capture_output=True, text=True, check=True
                )
                return result.stdout
            subprocess.run(command, check=True)
            return ""
        except OSError as e:
            raise GcloudError(_cannot_run(self.executable, e), command) from e
        except subprocess.CalledProcessError as e:
            details = (e.stderr or "").strip() if capture else ""
            message = f"'{' '.join(command)}' failed with exit code {e.returncode}."
            if details:
                message += f"\n{details}"
            raise GcloudError(message, command) from e

    def is_authenticated(self) -> bool:
        """Probes the application default credentials for an access token."""
        try:
            result = subprocess.run(
                [self.executable, "auth", "application-default", "print-access-token"],
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
            )
        except OSError as e:
            raise GcloudError(_cannot_run(self.executable, e)) from e
        return result.returncode == 0

    def login(self):
        self._run("auth", "login", capture=False)

    def application_default_login(self):
        # Client libraries read a separate credential store, so the user
        # login alone is not enough.
        self._run("auth", "application-default", "login", capture=False)

    def get_project(self) -> Optional[str]:
        """Returns the configured project, or None when it is empty or unset."""
        project = self._run("config", "get-value", "project").strip()
        if not project or project == UNSET_PROJECT:
            return None
        return project

    def set_project(self, project_id: str):
        self._run("config", "set", "project", project_id)

    def enable_service(self, service: str = VERTEX_AI_SERVICE):
        self._run("services", "enable", service, capture=False)

    def list_projects(self) -> List[Dict]:
        try:
            output = self._run("projects", "list", "--format=json")
            projects = json.loads(output or "[]")
        except (GcloudError, json.JSONDecodeError) as e:
            raise ProjectListingError(
                "Failed to fetch projects. Please check your gcloud authentication and permissions."
            ) from e

        if not isinstance(projects, list):
            raise ProjectListingError(
                "Failed to fetch projects. Unexpected output from 'gcloud projects list'."
            )
        return projects
