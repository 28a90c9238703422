"""Tests for CLI entry point."""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from suspension.bulletins import WeatherBulletin
from suspension.cli import main


@pytest.fixture
def runner() -> CliRunner:
    """Create a Click test runner."""
    return CliRunner()


class TestRunCommand:
    def test_run_writes_snapshot(self, runner: CliRunner, feed_file: Path, tmp_path: Path) -> None:
        out_dir = tmp_path / "out"
        result = runner.invoke(main, [
            "run",
            "--feed-file", str(feed_file),
            "--output-dir", str(out_dir),
            "--today", "2024-07-06",
        ])

        assert result.exit_code == 0, result.output
        assert "Status snapshot written for 2024-07-06" in result.output
        assert "Locations: 5" in result.output
        assert "partial=2, suspended=1" in result.output

        written = out_dir / "2024-07-06" / "status.json"
        with open(written, encoding="utf-8") as f:
            data = json.load(f)
        assert data["locations"]["台北市"]["dates"]["2024-07-07"]["status"] == "suspended"

    def test_run_fetches_when_no_file(self, runner: CliRunner, sample_feed: dict, tmp_path: Path) -> None:
        with patch("suspension.cli.fetch_feed", return_value=sample_feed) as mock_fetch:
            result = runner.invoke(main, [
                "run", "--output-dir", str(tmp_path), "--today", "2024-07-06",
            ])
        assert result.exit_code == 0, result.output
        mock_fetch.assert_called_once()

    def test_invalid_feed_fails_without_output(self, runner: CliRunner, tmp_path: Path) -> None:
        bad_feed = tmp_path / "bad.json"
        bad_feed.write_text(json.dumps({"entry": "oops"}), encoding="utf-8")
        out_dir = tmp_path / "out"

        result = runner.invoke(main, [
            "run", "--feed-file", str(bad_feed), "--output-dir", str(out_dir),
        ])

        assert result.exit_code == 1
        assert "停班課資料載入失敗" in result.output
        assert not out_dir.exists()

    def test_non_utf8_feed_file_fails_cleanly(self, runner: CliRunner, tmp_path: Path) -> None:
        bad_feed = tmp_path / "latin1.json"
        bad_feed.write_bytes(b'{"entry": ["\xff\xfe"]}')
        out_dir = tmp_path / "out"

        result = runner.invoke(main, [
            "run", "--feed-file", str(bad_feed), "--output-dir", str(out_dir),
        ])

        assert result.exit_code == 1
        assert not isinstance(result.exception, UnicodeDecodeError)
        assert "停班課資料載入失敗" in result.output
        assert not out_dir.exists()

    def test_malformed_json_feed_file(self, runner: CliRunner, tmp_path: Path) -> None:
        bad_feed = tmp_path / "truncated.json"
        bad_feed.write_text('{"entry": [', encoding="utf-8")

        result = runner.invoke(main, ["run", "--feed-file", str(bad_feed), "--output-dir", str(tmp_path)])

        assert result.exit_code == 1
        assert "停班課資料載入失敗" in result.output

    def test_invalid_today(self, runner: CliRunner, feed_file: Path, tmp_path: Path) -> None:
        result = runner.invoke(main, [
            "run", "--feed-file", str(feed_file), "--output-dir", str(tmp_path), "--today", "7/6",
        ])
        assert result.exit_code != 0
        assert "YYYY-MM-DD" in result.output


class TestShowCommand:
    def test_show_after_run(self, runner: CliRunner, feed_file: Path, tmp_path: Path) -> None:
        runner.invoke(main, [
            "run", "--feed-file", str(feed_file), "--output-dir", str(tmp_path), "--today", "2024-07-06",
        ])

        result = runner.invoke(main, [
            "show",
            "--snapshot", str(tmp_path / "latest" / "status.json"),
            "--today", "2024-07-06",
        ])

        assert result.exit_code == 0, result.output
        assert "台北市  7月6日：照常上班、照常上課 [正常上班上課]" in result.output
        assert "7月7日：明天停止上班停止上課 [全天停止上班上課]" in result.output
        assert "南投縣信義鄉  7月6日：今天停止上班停止上課 [全天停止上班上課]" in result.output
        assert "澎湖縣  7月6日：今天學校停止上課 [部分區域或特定人員停止上班上課]" in result.output
        assert "金門縣  7月7日：尚未發布資訊 [沒有公布資訊]" in result.output

    def test_show_missing_snapshot(self, runner: CliRunner, tmp_path: Path) -> None:
        result = runner.invoke(main, ["show", "--snapshot", str(tmp_path / "none.json")])
        assert result.exit_code == 1
        assert "suspension run" in result.output

    @pytest.mark.parametrize("content", [b"\xff\xfe\x00", b'{"locations": {}}', b"[1, 2]"])
    def test_show_corrupt_snapshot(self, runner: CliRunner, tmp_path: Path, content: bytes) -> None:
        snapshot = tmp_path / "status.json"
        snapshot.write_bytes(content)

        result = runner.invoke(main, ["show", "--snapshot", str(snapshot)])

        assert result.exit_code == 1
        assert "停班課資料載入失敗" in result.output
        assert "corrupt" in result.output


class TestBulletinsCommand:
    def test_lists_bulletins(self, runner: CliRunner) -> None:
        items = [WeatherBulletin(title="海上陸上颱風警報", link="https://example.test/w")]
        with patch("suspension.cli.fetch_bulletins", return_value=items):
            result = runner.invoke(main, ["bulletins"])
        assert result.exit_code == 0
        assert "海上陸上颱風警報" in result.output
        assert "https://example.test/w" in result.output

    def test_no_bulletins(self, runner: CliRunner) -> None:
        with patch("suspension.cli.fetch_bulletins", return_value=[]):
            result = runner.invoke(main, ["bulletins"])
        assert "目前無天氣快報" in result.output
