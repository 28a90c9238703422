"""Tests for the weather bulletin feed."""

from __future__ import annotations

from datetime import datetime, timezone
from unittest.mock import MagicMock, patch

import requests

from suspension.bulletins import UNTITLED, fetch_bulletins, parse_bulletins

SAMPLE_RSS = """<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0">
  <channel>
    <title>天氣特報</title>
    <link>https://www.cwa.gov.tw/</link>
    <description>CWA warnings</description>
    <item>
      <title>海上陸上颱風警報</title>
      <link>https://www.cwa.gov.tw/V8/C/P/Warning/FIFOWS.html</link>
      <pubDate>Sat, 06 Jul 2024 12:30:00 GMT</pubDate>
    </item>
    <item>
      <description>豪雨特報</description>
    </item>
  </channel>
</rss>
"""


class TestParseBulletins:
    def test_parses_items(self) -> None:
        bulletins = parse_bulletins(SAMPLE_RSS)
        assert len(bulletins) == 2

        first = bulletins[0]
        assert first.title == "海上陸上颱風警報"
        assert first.link == "https://www.cwa.gov.tw/V8/C/P/Warning/FIFOWS.html"
        assert first.published == datetime(2024, 7, 6, 12, 30, tzinfo=timezone.utc)

    def test_missing_fields_use_placeholders(self) -> None:
        second = parse_bulletins(SAMPLE_RSS)[1]
        assert second.title == UNTITLED
        assert second.link == "#"
        assert second.published is None

    def test_to_dict(self) -> None:
        data = parse_bulletins(SAMPLE_RSS)[0].to_dict()
        assert data["published"] == "2024-07-06T12:30:00+00:00"

    def test_empty_channel(self) -> None:
        rss = "<rss version='2.0'><channel><title>x</title></channel></rss>"
        assert parse_bulletins(rss) == []


class TestFetchBulletins:
    def test_fetch_failure_returns_empty(self) -> None:
        with patch("suspension.bulletins.requests.get", side_effect=requests.ConnectionError("down")):
            assert fetch_bulletins("https://example.test/rss") == []

    def test_fetch_parses_content(self) -> None:
        mock_resp = MagicMock()
        mock_resp.content = SAMPLE_RSS.encode("utf-8")
        with patch("suspension.bulletins.requests.get", return_value=mock_resp):
            bulletins = fetch_bulletins("https://example.test/rss")
        assert [b.title for b in bulletins] == ["海上陸上颱風警報", UNTITLED]
