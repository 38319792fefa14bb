import json

from dataclasses import dataclass, asdict
from typing import Dict, Optional

from .errors import SettingsError

DEFAULT_MODEL_NAME = "claude-sonnet-4-5"
DEFAULT_SMALL_MODEL_NAME = "claude-3-5-haiku"
DEFAULT_VERTEX_REGION = "europe-west1"
DEFAULT_DISABLE_PROMPT_CACHING = True

# Keys accepted in a settings file, mapped to WrapperSettings fields.
SETTINGS_FILE_KEYS = {
    "modelName": "model_name",
    "smallModelName": "small_model_name",
    "vertexRegion": "vertex_region",
    "disablePromptCaching": "disable_prompt_caching",
    "projectId": "project_id",
}


@dataclass(frozen=True)
class WrapperSettings:
    """Values fixed when a launcher is built.

    A ``None`` model, small model or region means the matching variable is
    not exported at all. ``project_id`` set here wins over every runtime
    source.
    """

    model_name: Optional[str] = DEFAULT_MODEL_NAME
    small_model_name: Optional[str] = DEFAULT_SMALL_MODEL_NAME
    vertex_region: Optional[str] = DEFAULT_VERTEX_REGION
    disable_prompt_caching: bool = DEFAULT_DISABLE_PROMPT_CACHING
    project_id: Optional[str] = None

    def __post_init__(self):
        # An empty literal behaves as if no literal was given.
        if self.project_id == "":
            object.__setattr__(self, "project_id", None)

        # Values end up on single lines of a generated launcher.
        for field in ("model_name", "small_model_name", "vertex_region", "project_id"):
            value = getattr(self, field)
            if value is not None and ("\n" in value or "\r" in value):
                raise SettingsError(f"'{field}' must not contain line breaks.")

    def replace(self, **changes) -> "WrapperSettings":
        values = asdict(self)
        values.update(changes)
        return WrapperSettings(**values)


def settings_from_dict(data: Dict) -> WrapperSettings:
    if not isinstance(data, dict):
        raise SettingsError("Settings must be a JSON object.")

    unknown = sorted(set(data) - set(SETTINGS_FILE_KEYS))
    if unknown:
        raise SettingsError(f"Unknown settings: {', '.join(unknown)}")

    values = {}
    for key, value in data.items():
        field = SETTINGS_FILE_KEYS[key]
        if field == "disable_prompt_caching":
            if not isinstance(value, bool):
                raise SettingsError(f"'{key}' must be true or false.")
        elif value is not None and not isinstance(value, str):
            raise SettingsError(f"'{key}' must be a string or null.")
        values[field] = value

    return WrapperSettings(**values)


def load_settings(path: str) -> WrapperSettings:
    """Reads build-time settings from a JSON file."""
    try:
        with open(path, "r", encoding="utf-8") as settings_file:
            data = json.load(settings_file)
    except (OSError, json.JSONDecodeError) as e:
        raise SettingsError(f"Error reading or parsing {path}: {e}") from e

    return settings_from_dict(data)

