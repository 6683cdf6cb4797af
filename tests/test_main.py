"""
Tests for the sysinventory command line.
"""

# pylint: disable=redefined-outer-name

import json
import logging
from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from main import app, setup_logging
from src.sysinventory.core.config import ConfigManager

runner = CliRunner()


@pytest.fixture
def quiet_config(tmp_path):
    """Configuration that keeps stderr empty and output compact."""
    mounts = tmp_path / "mounts"
    mounts.write_text(
        "/dev/sda2 / ext4 rw 0 0\nproc /proc proc rw 0 0\n", encoding="utf-8"
    )
    path = tmp_path / "sysinventory.yaml"
    path.write_text(
        f"""
logging:
  level: "ERROR"
collection:
  mounts_file: "{mounts}"
  uuid_dir: "{tmp_path / 'by-uuid'}"
  file_nr: "{tmp_path / 'file-nr'}"
output:
  indent: 0
""",
        encoding="utf-8",
    )
    return str(path)


@pytest.fixture
def capture_dir(tmp_path):
    """Captured FreeBSD outputs for one disk with one partition."""
    directory = tmp_path / "captures"
    directory.mkdir()
    (directory / "kern_disks.txt").write_text("ada0\n", encoding="utf-8")
    (directory / "mount.txt").write_text(
        "/dev/ada0p2 on /usr (ufs, local)\n", encoding="utf-8"
    )
    (directory / "iostat.txt").write_text(
        "ada0 12.0 8.0 128.0 64.0 - - 1.5\n", encoding="utf-8"
    )
    (directory / "geom_disk.txt").write_text(
        "Geom name: ada0\nMediasize: 500107862016 (465G)\ndescr: SAMSUNG SSD\n",
        encoding="utf-8",
    )
    (directory / "geom_part.txt").write_text(
        "Geom name: ada0\n1. Name: ada0p2\n   Mediasize: 104857600\n"
        "   rawuuid: 1234-5678\n",
        encoding="utf-8",
    )
    return str(directory)


@pytest.fixture(autouse=True)
def restore_root_logger():
    """Put the root logger back after each CLI run."""
    root_logger = logging.getLogger()
    handlers = root_logger.handlers[:]
    level = root_logger.level
    yield
    root_logger.handlers = handlers
    root_logger.setLevel(level)


class TestDisksCommand:
    """Tests for the disks command."""

    def test_disks_from_capture(self, quiet_config, capture_dir):
        """Test a replayed snapshot."""
        result = runner.invoke(
            app, ["disks", "--config", quiet_config, "--capture-dir", capture_dir]
        )

        assert result.exit_code == 0
        payload = json.loads(result.output)
        disk = payload["disks"][0]
        assert disk["name"] == "ada0"
        assert disk["model"] == "SAMSUNG SSD"
        assert disk["read_bytes"] == 131072
        assert disk["partitions"][0]["mount_point"] == "/usr"
        assert disk["partitions"][0]["uuid"] == "1234-5678"
        assert "diagnostics" not in payload

    def test_disks_with_diagnostics(self, quiet_config, capture_dir):
        """Test that diagnostics can be requested."""
        result = runner.invoke(
            app,
            [
                "disks",
                "--config",
                quiet_config,
                "--capture-dir",
                capture_dir,
                "--diagnostics",
            ],
        )

        assert result.exit_code == 0
        payload = json.loads(result.output)
        assert payload["diagnostics"]["geom_part"]["lines"] == 4
        assert payload["diagnostics"]["minor"]["lookup_failed"] == 1

    def test_config_from_environment(self, quiet_config, capture_dir, monkeypatch):
        """Test SYSINVENTORY_CONFIG."""
        monkeypatch.setenv("SYSINVENTORY_CONFIG", quiet_config)

        result = runner.invoke(app, ["disks", "--capture-dir", capture_dir])

        assert result.exit_code == 0
        assert json.loads(result.output)["disks"][0]["name"] == "ada0"

    def test_missing_config_exits_1(self, tmp_path):
        """Test a configuration error."""
        result = runner.invoke(
            app, ["disks", "--config", str(tmp_path / "absent.yaml")]
        )

        assert result.exit_code == 1


class TestOtherCommands:
    """Tests for the filesystems and inventory commands."""

    def test_filesystems(self, quiet_config):
        """Test listing file stores from the configured mount table."""
        with patch("shutil.disk_usage", side_effect=OSError("no")):
            result = runner.invoke(app, ["filesystems", "--config", quiet_config])

        assert result.exit_code == 0
        stores = json.loads(result.output)
        assert [s["mount"] for s in stores] == ["/"]

    def test_inventory_from_capture(self, quiet_config, capture_dir):
        """Test the combined inventory over captures."""
        with patch("platform.system", return_value="Darwin"):
            result = runner.invoke(
                app,
                ["inventory", "--config", quiet_config, "--capture-dir", capture_dir],
            )

        assert result.exit_code == 0
        payload = json.loads(result.output)
        assert payload["platform"] == "Darwin"
        assert payload["disks"][0]["partitions"][0]["name"] == "ada0p2"
        assert payload["diagnostics"]["iostat"]["lines"] == 1
        assert payload["diagnostics"]["minor"]["lookup_failed"] == 1

    def test_inventory_unsupported_platform(self, quiet_config):
        """Test the exit code on an unsupported platform."""
        with patch("platform.system", return_value="Windows"):
            result = runner.invoke(app, ["inventory", "--config", quiet_config])

        assert result.exit_code == 2
        assert "error" in json.loads(result.output)


class TestSetupLogging:
    """Tests for setup_logging."""

    def test_file_handler_added(self, tmp_path):
        """Test logging to the configured file."""
        path = tmp_path / "cfg.yaml"
        log_file = tmp_path / "logs" / "sysinventory.log"
        path.write_text(f'logging:\n  file: "{log_file}"\n', encoding="utf-8")

        setup_logging(ConfigManager(str(path)))
        logging.getLogger("sysinventory.test").warning("written")
        for handler in logging.getLogger().handlers:
            handler.flush()

        assert "written" in log_file.read_text(encoding="utf-8")

    def test_verbose_forces_debug(self, quiet_config):
        """Test --verbose behaviour."""
        setup_logging(ConfigManager(quiet_config), verbose=True)

        assert logging.getLogger().level == logging.DEBUG
