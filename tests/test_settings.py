import unittest
from unittest.mock import patch, mock_open

from claude_vertex import settings
from claude_vertex.errors import SettingsError
from claude_vertex.settings import WrapperSettings


class TestWrapperSettings(unittest.TestCase):
    """Tests for the build-time settings record."""

    def test_defaults(self):
        """The defaults match the stock launcher."""
        s = WrapperSettings()
        self.assertEqual(s.model_name, "claude-sonnet-4-5")
        self.assertEqual(s.small_model_name, "claude-3-5-haiku")
        self.assertEqual(s.vertex_region, "europe-west1")
        self.assertTrue(s.disable_prompt_caching)
        self.assertIsNone(s.project_id)

    def test_empty_project_id_means_no_literal(self):
        self.assertIsNone(WrapperSettings(project_id="").project_id)
        self.assertIsNone(WrapperSettings().replace(project_id="").project_id)

    def test_replace_keeps_other_fields(self):
        s = WrapperSettings(vertex_region="us-central1").replace(model_name="m")
        self.assertEqual(s.model_name, "m")
        self.assertEqual(s.vertex_region, "us-central1")


class TestLoadSettings(unittest.TestCase):
    """Tests for reading settings files."""

    @patch(
        "builtins.open",
        new_callable=mock_open,
        read_data='{"modelName": "test-model", "projectId": "test-project", "disablePromptCaching": false}',
    )
    def test_load_valid_file(self, mock_file):
        s = settings.load_settings("settings.json")
        mock_file.assert_called_once_with("settings.json", "r", encoding="utf-8")
        self.assertEqual(s.model_name, "test-model")
        self.assertEqual(s.project_id, "test-project")
        self.assertFalse(s.disable_prompt_caching)
        # Unspecified keys keep their defaults.
        self.assertEqual(s.vertex_region, "europe-west1")

    @patch("builtins.open", new_callable=mock_open, read_data="{invalid json")
    def test_load_invalid_json(self, mock_file):
        with self.assertRaises(SettingsError) as cm:
            settings.load_settings("settings.json")
        self.assertIn("Error reading or parsing settings.json", str(cm.exception))

    @patch("builtins.open", side_effect=FileNotFoundError("no such file"))
    def test_load_missing_file(self, mock_file):
        with self.assertRaises(SettingsError):
            settings.load_settings("missing.json")

    def test_null_disables_a_field(self):
        s = settings.settings_from_dict({"vertexRegion": None})
        self.assertIsNone(s.vertex_region)

    def test_line_breaks_in_file_values_are_rejected(self):
        with self.assertRaises(SettingsError):
            settings.settings_from_dict({"projectId": "p\nimport os"})

    def test_unknown_keys_are_rejected(self):
        with self.assertRaises(SettingsError) as cm:
            settings.settings_from_dict({"modelName": "m", "region": "x"})
        self.assertIn("region", str(cm.exception))

    def test_wrong_types_are_rejected(self):
        with self.assertRaises(SettingsError):
            settings.settings_from_dict({"disablePromptCaching": "yes"})
        with self.assertRaises(SettingsError):
            settings.settings_from_dict({"modelName": 3})
        with self.assertRaises(SettingsError):
            settings.settings_from_dict(["modelName"])
