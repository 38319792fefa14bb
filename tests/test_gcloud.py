import json
import subprocess
import unittest
from unittest.mock import patch, MagicMock

from claude_vertex.errors import GcloudError, ProjectListingError
from claude_vertex.gcloud import GcloudClient


class TestGcloudClient(unittest.TestCase):
    """Tests for the gcloud command wrapper."""

    def setUp(self):
        self.gcloud = GcloudClient()

    @patch("subprocess.run")
    def test_is_authenticated_true(self, mock_run):
        mock_run.return_value = MagicMock(returncode=0)
        self.assertTrue(self.gcloud.is_authenticated())
        command = mock_run.call_args.args[0]
        self.assertEqual(
            command, ["gcloud", "auth", "application-default", "print-access-token"]
        )

    @patch("subprocess.run")
    def test_is_authenticated_false(self, mock_run):
        mock_run.return_value = MagicMock(returncode=1)
        self.assertFalse(self.gcloud.is_authenticated())

    @patch("subprocess.run", side_effect=FileNotFoundError)
    def test_is_authenticated_without_gcloud(self, mock_run):
        with self.assertRaises(GcloudError) as cm:
            self.gcloud.is_authenticated()
        self.assertIn("Google Cloud SDK", str(cm.exception))

    @patch("subprocess.run", side_effect=PermissionError(13, "Permission denied"))
    def test_unrunnable_gcloud(self, mock_run):
        """Any OS-level failure to start gcloud becomes a GcloudError."""
        with self.assertRaises(GcloudError) as cm:
            self.gcloud.is_authenticated()
        self.assertIn("Permission denied", str(cm.exception))

        with self.assertRaises(GcloudError):
            self.gcloud.get_project()

    @patch("subprocess.run")
    def test_logins_are_interactive(self, mock_run):
        """Both logins inherit the terminal instead of capturing output."""
        self.gcloud.login()
        self.gcloud.application_default_login()
        mock_run.assert_any_call(["gcloud", "auth", "login"], check=True)
        mock_run.assert_any_call(
            ["gcloud", "auth", "application-default", "login"], check=True
        )

    @patch("subprocess.run")
    def test_get_project(self, mock_run):
        mock_run.return_value = MagicMock(stdout="my-project\n")
        self.assertEqual(self.gcloud.get_project(), "my-project")
        self.assertEqual(
            mock_run.call_args.args[0], ["gcloud", "config", "get-value", "project"]
        )

    @patch("subprocess.run")
    def test_get_project_unset(self, mock_run):
        """The unset sentinel and empty output both mean no project."""
        for output in ["(unset)\n", "", "\n"]:
            mock_run.return_value = MagicMock(stdout=output)
            self.assertIsNone(self.gcloud.get_project())

    @patch("subprocess.run")
    def test_set_project_and_enable_service(self, mock_run):
        self.gcloud.set_project("my-project")
        self.gcloud.enable_service()
        mock_run.assert_any_call(
            ["gcloud", "config", "set", "project", "my-project"],
            capture_output=True,
            text=True,
            check=True,
        )
        mock_run.assert_any_call(
            ["gcloud", "services", "enable", "aiplatform.googleapis.com"], check=True
        )

    @patch("subprocess.run")
    def test_failed_command_raises(self, mock_run):
        mock_run.side_effect = subprocess.CalledProcessError(
            1, ["gcloud"], stderr="PERMISSION_DENIED"
        )
        with self.assertRaises(GcloudError) as cm:
            self.gcloud.set_project("my-project")
        self.assertIn("PERMISSION_DENIED", str(cm.exception))
        self.assertEqual(
            cm.exception.command, ["gcloud", "config", "set", "project", "my-project"]
        )

    @patch("subprocess.run")
    def test_list_projects(self, mock_run):
        projects = [{"projectId": "p1", "name": "First"}]
        mock_run.return_value = MagicMock(stdout=json.dumps(projects))
        self.assertEqual(self.gcloud.list_projects(), projects)
        self.assertEqual(
            mock_run.call_args.args[0], ["gcloud", "projects", "list", "--format=json"]
        )

    @patch("subprocess.run")
    def test_list_projects_failure(self, mock_run):
        mock_run.side_effect = subprocess.CalledProcessError(1, ["gcloud"], stderr="")
        with self.assertRaises(ProjectListingError) as cm:
            self.gcloud.list_projects()
        self.assertIn("Failed to fetch projects", str(cm.exception))

    @patch("subprocess.run")
    def test_list_projects_bad_output(self, mock_run):
        for output in ["not json", '{"projectId": "p1"}']:
            mock_run.return_value = MagicMock(stdout=output)
            with self.assertRaises(ProjectListingError):
                self.gcloud.list_projects()
