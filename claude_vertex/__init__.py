"""
Launches Claude Code against Google Cloud Vertex AI, taking care of gcloud
authentication and project selection first.
"""

from .bootstrap import LaunchPlan, SessionBootstrapper
from .resolver import ProjectResolver
from .settings import WrapperSettings


__all__ = [
    "LaunchPlan",
    "ProjectResolver",
    "SessionBootstrapper",
    "WrapperSettings",
]
