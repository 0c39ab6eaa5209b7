"""Tests for the upload CLI script."""

import os
import subprocess
import sys
from pathlib import Path

# Project paths
project_root = Path(__file__).parent.parent
upload_script = project_root / "scripts" / "upload.py"


def run_upload(*args, env=None):
    return subprocess.run(
        [sys.executable, str(upload_script), *args],
        capture_output=True,
        text=True,
        env=env,
    )


def env_without_gcp():
    env = dict(os.environ)
    env.pop("GOOGLE_CLOUD_PROJECT", None)
    env.pop("GOOGLE_APPLICATION_CREDENTIALS", None)
    env["METRICS_ENABLED"] = "false"
    return env


class TestUploadCLI:
    """Tests for upload.py CLI script."""

    def test_help_message(self):
        result = run_upload("--help")

        assert result.returncode == 0
        assert "gzip-compressed file" in result.stdout
        assert "--metrics-port" in result.stdout
        assert "GOOGLE_CLOUD_PROJECT" in result.stdout

    def test_missing_required_args(self):
        result = run_upload()

        assert result.returncode != 0
        assert "required" in result.stderr.lower()

    def test_missing_project_exits_with_status_1(self, tmp_path):
        notes = tmp_path / "notes.txt"
        notes.write_text("hello")

        result = run_upload("my-bucket", str(notes), env=env_without_gcp())

        assert result.returncode == 1
        assert "GOOGLE_CLOUD_PROJECT" in result.stderr

    def test_missing_credentials_exits_with_status_1(self, tmp_path):
        notes = tmp_path / "notes.txt"
        notes.write_text("hello")
        env = env_without_gcp()
        env["GOOGLE_CLOUD_PROJECT"] = "test-project"

        result = run_upload("my-bucket", str(notes), env=env)

        assert result.returncode == 1
        assert "GOOGLE_APPLICATION_CREDENTIALS" in result.stderr


class TestCLIScript:
    """Static checks on the script file."""

    def test_script_has_shebang(self):
        with open(upload_script, "r") as f:
            assert f.readline().strip() == "#!/usr/bin/env python3"

    def test_script_compiles(self):
        result = subprocess.run(
            [sys.executable, "-m", "py_compile", str(upload_script)],
            capture_output=True,
            text=True,
        )
        assert result.returncode == 0, result.stderr


class TestUploadMain:
    """Run main() in-process against a mocked storage client."""

    @staticmethod
    def load_script():
        import importlib.util

        spec = importlib.util.spec_from_file_location("upload_cli", upload_script)
        module = importlib.util.module_from_spec(spec)
        spec.loader.exec_module(module)
        return module

    def test_main_uploads_file(self, tmp_path, monkeypatch, capsys):
        import io
        from unittest.mock import patch

        import gzupload.utils.config as config_module

        monkeypatch.setattr(config_module, "ENV_FILE", tmp_path / ".env")
        monkeypatch.setenv("GOOGLE_CLOUD_PROJECT", "test-project")
        monkeypatch.setenv("GOOGLE_APPLICATION_CREDENTIALS", "/keys/sa.json")
        notes = tmp_path / "notes.txt"
        notes.write_text("hello")

        cli = self.load_script()
        with patch("google.cloud.storage.Client") as mock_client_class:
            bucket = mock_client_class.return_value.bucket.return_value
            bucket.blob.return_value.open.return_value = io.BytesIO()
            exit_code = cli.main(["my-bucket", str(notes)])

        assert exit_code == 0
        assert "gs://my-bucket/notes.gzip" in capsys.readouterr().out

    def test_main_reports_upload_failure(self, tmp_path, monkeypatch, capsys):
        from unittest.mock import patch

        import gzupload.utils.config as config_module

        monkeypatch.setattr(config_module, "ENV_FILE", tmp_path / ".env")
        monkeypatch.setenv("GOOGLE_CLOUD_PROJECT", "test-project")
        monkeypatch.setenv("GOOGLE_APPLICATION_CREDENTIALS", "/keys/sa.json")

        cli = self.load_script()
        with patch("google.cloud.storage.Client"):
            exit_code = cli.main(["my-bucket", str(tmp_path / "missing.txt")])

        assert exit_code == 1
        assert "Upload failed" in capsys.readouterr().err

    def test_verbose_lowers_handler_levels(self, tmp_path, monkeypatch):
        import logging

        import gzupload.utils.config as config_module
        from gzupload.utils.logging import setup_logging

        monkeypatch.setattr(config_module, "ENV_FILE", tmp_path / ".env")
        monkeypatch.delenv("GOOGLE_CLOUD_PROJECT", raising=False)
        setup_logging(level="INFO")

        cli = self.load_script()
        exit_code = cli.main(["-v", "my-bucket", str(tmp_path / "notes.txt")])

        root_logger = logging.getLogger()
        assert exit_code == 1
        assert root_logger.level == logging.DEBUG
        assert root_logger.handlers
        assert all(h.level <= logging.DEBUG for h in root_logger.handlers)
