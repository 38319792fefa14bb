class WrapperError(Exception):
    """Base class for every failure that should stop the launch."""


class SettingsError(WrapperError):
    pass


class GcloudError(WrapperError):
    """A gcloud invocation failed or gcloud is not installed."""

    def __init__(self, message: str, command=None):
        super().__init__(message)
        self.command = command


class ProjectListingError(WrapperError):
    pass


class NoProjectsError(WrapperError):
    pass


class ProjectSelectionCancelled(WrapperError):
    pass


class UnresolvedProjectError(WrapperError):
    pass


class InteractiveTerminalRequired(WrapperError):
    pass


class ExecutableNotFound(WrapperError):
    pass
