"""
Tests for the command line interface.
"""

from __future__ import annotations

from pathlib import Path

import orjson
import pytest
from typer.testing import CliRunner

from quotacache import __version__
from quotacache.cli.main import app
from quotacache.config import clear_settings_cache

runner = CliRunner()


@pytest.fixture(autouse=True)
def cli_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point the CLI at a temporary SQLite store."""
    store_path = tmp_path / "cli" / "store.db"
    monkeypatch.setenv("QUOTACACHE_STORE_PATH", str(store_path))
    monkeypatch.setenv("QUOTACACHE_STORE_CAPACITY", "10000")
    monkeypatch.chdir(tmp_path)
    clear_settings_cache()
    yield store_path
    clear_settings_cache()


class TestValueCommands:
    """Tests for set/get/remove."""

    def test_set_then_get(self) -> None:
        """Test storing a string and reading it back."""
        result = runner.invoke(app, ["set", "greeting", "hello"])
        assert result.exit_code == 0

        result = runner.invoke(app, ["get", "greeting"])
        assert result.exit_code == 0
        assert '"hello"' in result.output

    def test_set_json_in_bucket(self) -> None:
        """Test storing parsed JSON in a named bucket."""
        result = runner.invoke(
            app, ["set", "cfg", '{"retries": 3}', "--json", "--bucket", "app"]
        )
        assert result.exit_code == 0

        result = runner.invoke(app, ["get", "cfg", "--bucket", "app"])
        assert result.exit_code == 0
        assert "retries" in result.output

        assert runner.invoke(app, ["get", "cfg"]).exit_code == 1

    def test_invalid_json_rejected(self) -> None:
        """Test that --json refuses malformed input."""
        result = runner.invoke(app, ["set", "k", "{nope", "--json"])
        assert result.exit_code == 2

    def test_remove(self) -> None:
        """Test removing a stored value."""
        runner.invoke(app, ["set", "k", "v"])
        assert runner.invoke(app, ["remove", "k"]).exit_code == 0
        assert runner.invoke(app, ["get", "k"]).exit_code == 1

    def test_oversized_value_fails(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that a value larger than the store is refused."""
        monkeypatch.setenv("QUOTACACHE_STORE_CAPACITY", "100")
        result = runner.invoke(app, ["set", "big", "x" * 500])
        assert result.exit_code == 1

    def test_invalid_bucket_name(self) -> None:
        """Test that a bucket name with a separator is rejected."""
        result = runner.invoke(app, ["get", "k", "--bucket", "a/b"])
        assert result.exit_code == 2

    def test_default_key_with_separator_rejected(self) -> None:
        """Test that a default-bucket key containing '/' is rejected."""
        assert runner.invoke(app, ["set", "a/b", "v"]).exit_code == 2
        assert runner.invoke(app, ["get", "a/b"]).exit_code == 2
        assert runner.invoke(app, ["remove", "a/b"]).exit_code == 2

        runner.invoke(app, ["set", "b/c", "v", "--bucket", "a"])
        result = runner.invoke(app, ["get", "b/c", "--bucket", "a"])
        assert result.exit_code == 0


class TestBucketCommands:
    """Tests for keys/flush/stats."""

    def test_keys_and_flush(self) -> None:
        """Test listing keys and flushing a bucket."""
        runner.invoke(app, ["set", "one", "1", "--bucket", "b"])
        runner.invoke(app, ["set", "two", "2", "--bucket", "b"])
        runner.invoke(app, ["set", "default", "d"])

        result = runner.invoke(app, ["keys", "--bucket", "b"])
        assert result.exit_code == 0
        assert result.output.split() == ["one", "two"]

        assert runner.invoke(app, ["flush", "--bucket", "b"]).exit_code == 0
        assert runner.invoke(app, ["keys", "--bucket", "b"]).output.split() == []
        assert runner.invoke(app, ["get", "default"]).exit_code == 0

    def test_flush_expired_keeps_live_values(self) -> None:
        """Test that --expired leaves unexpired values in place."""
        runner.invoke(app, ["set", "live", "v", "--ttl", "60"])
        result = runner.invoke(app, ["flush", "--expired"])
        assert result.exit_code == 0
        assert runner.invoke(app, ["get", "live"]).exit_code == 0

    def test_stats(self) -> None:
        """Test the usage summary."""
        runner.invoke(app, ["set", "k", "v", "--ttl", "5"])
        result = runner.invoke(app, ["stats"])
        assert result.exit_code == 0
        assert "entries" in result.output
        assert "10000" in result.output


class TestInfoCommands:
    """Tests for config/version."""

    def test_version(self) -> None:
        """Test the version output."""
        result = runner.invoke(app, ["version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_config(self) -> None:
        """Test the configuration table."""
        result = runner.invoke(app, ["config"])
        assert result.exit_code == 0
        assert "STORE_CAPACITY" in result.output

    def test_invalid_config(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that invalid settings exit with an error."""
        monkeypatch.setenv("QUOTACACHE_EXPIRY_MILLISECONDS", "0")
        result = runner.invoke(app, ["config"])
        assert result.exit_code == 1

    def test_log_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that QUOTACACHE_LOG_FILE receives JSON lines."""
        log_file = tmp_path / "logs" / "cli.jsonl"
        monkeypatch.setenv("QUOTACACHE_LOG_LEVEL", "DEBUG")
        monkeypatch.setenv("QUOTACACHE_LOG_FILE", str(log_file))

        assert runner.invoke(app, ["set", "k", "v"]).exit_code == 0

        lines = [orjson.loads(line) for line in log_file.read_text().splitlines()]
        assert any(line["logger"] == "quotacache.stores.sqlite" for line in lines)
