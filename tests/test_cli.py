"""Tests for the brandmeta CLI (generate, brands, scrape)."""

from __future__ import annotations

import csv
import io
import json
from unittest.mock import AsyncMock

import httpx
import pytest
import respx
from typer.testing import CliRunner

from brandmeta.models import (
    GeneratedMetadata,
    MetadataBatchResponse,
    MetadataResult,
)
from cli.main import app

runner = CliRunner()


def _response() -> MetadataBatchResponse:
    return MetadataBatchResponse(
        results=[
            MetadataResult.success(
                "https://example.com/a",
                GeneratedMetadata(
                    page_title="Trail Shoes | Acme",
                    meta_description='Grip "beats" weight.',
                    og_title="Pick trail shoes",
                    og_description="Our guide.",
                ),
            ),
            MetadataResult.failure("https://example.com/b", "Failed to fetch https://example.com/b: HTTP 404"),
        ]
    )


@pytest.fixture
def brands_file(tmp_path):
    path = tmp_path / "brands.json"
    path.write_text(
        json.dumps(
            {
                "acme": {
                    "brandIdentity": "Outdoor gear",
                    "toneOfVoice": "Warm",
                    "guardrails": ["cheap"],
                    "language": "en",
                    "country": "GB",
                },
                "zeta": {"language": "de"},
            }
        ),
        encoding="utf-8",
    )
    return path


@pytest.fixture
def mock_generate(monkeypatch):
    mock = AsyncMock(return_value=_response())
    monkeypatch.setattr("cli.commands.generate.generate_metadata", mock)
    return mock


class TestGenerate:
    def test_prints_each_result(self, mock_generate, brands_file):
        result = runner.invoke(
            app,
            [
                "generate", "--brand", "acme", "--bulk",
                "--url", "https://example.com/a", "--url", "https://example.com/b",
                "--brands-file", str(brands_file),
            ],
        )

        assert result.exit_code == 0, result.output
        assert "✅ https://example.com/a" in result.output
        assert "Trail Shoes | Acme" in result.output
        assert "❌ https://example.com/b" in result.output
        assert "HTTP 404" in result.output

        request = mock_generate.await_args.args[0]
        assert request.brand_id == "acme"
        assert request.urls == ["https://example.com/a", "https://example.com/b"]
        assert request.is_bulk is True

    def test_reads_urls_file(self, mock_generate, tmp_path):
        urls_file = tmp_path / "urls.txt"
        urls_file.write_text(
            "# campaign pages\nhttps://example.com/a\n\n  https://example.com/b  \n",
            encoding="utf-8",
        )

        result = runner.invoke(
            app, ["generate", "--brand", "acme", "--bulk", "--urls-file", str(urls_file)]
        )

        assert result.exit_code == 0, result.output
        request = mock_generate.await_args.args[0]
        assert request.urls == ["https://example.com/a", "https://example.com/b"]

    def test_writes_csv(self, mock_generate, tmp_path):
        out = tmp_path / "results.csv"

        result = runner.invoke(
            app,
            ["generate", "--brand", "acme", "--bulk", "--url", "https://example.com/a",
             "--url", "https://example.com/b", "--csv", str(out)],
        )

        assert result.exit_code == 0, result.output
        rows = list(csv.reader(io.StringIO(out.read_text(encoding="utf-8"))))
        assert rows[0][0] == "URL"
        assert rows[1][:3] == ["https://example.com/a", "Trail Shoes | Acme", 'Grip "beats" weight.']
        assert rows[2][5] == "error"
        assert "Wrote 2 row(s)" in result.output

    def test_json_output(self, mock_generate):
        result = runner.invoke(
            app, ["generate", "--brand", "acme", "--url", "https://example.com/a", "--json"]
        )

        assert result.exit_code == 0, result.output
        payload = json.loads(result.stdout)
        assert payload["results"][0]["pageTitle"] == "Trail Shoes | Acme"
        assert payload["results"][1]["status"] == "error"

    def test_no_urls_is_request_error(self, brands_file):
        result = runner.invoke(
            app, ["generate", "--brand", "acme", "--brands-file", str(brands_file)]
        )

        assert result.exit_code == 1
        assert "❌ Error" in result.output

    def test_unknown_brand_is_request_error(self, brands_file):
        result = runner.invoke(
            app,
            ["generate", "--brand", "nope", "--url", "https://example.com/a",
             "--brands-file", str(brands_file)],
        )

        assert result.exit_code == 1
        assert "Brand not found" in result.output


class TestBrands:
    def test_list(self, brands_file):
        result = runner.invoke(app, ["brands", "list", "--brands-file", str(brands_file)])

        assert result.exit_code == 0, result.output
        assert " - acme (en-GB)" in result.output
        assert " - zeta (de)" in result.output

    def test_list_missing_file(self, tmp_path):
        result = runner.invoke(app, ["brands", "list", "--brands-file", str(tmp_path / "none.json")])

        assert result.exit_code == 0
        assert "No brands found" in result.output

    def test_show(self, brands_file):
        result = runner.invoke(app, ["brands", "show", "acme", "--brands-file", str(brands_file)])

        assert result.exit_code == 0, result.output
        assert "Outdoor gear" in result.output
        assert "Guardrails : cheap" in result.output

    def test_show_unknown(self, brands_file):
        result = runner.invoke(app, ["brands", "show", "nope", "--brands-file", str(brands_file)])
        assert result.exit_code == 1


class TestScrape:
    def test_prints_title_and_body(self):
        html = (
            '<html><head><title>T</title><meta name="description" content="D"></head>'
            "<body><article><h1>Heading</h1><p>Body words here.</p></article></body></html>"
        )
        with respx.mock:
            respx.get("https://example.com/a").mock(return_value=httpx.Response(200, text=html))
            result = runner.invoke(app, ["scrape", "--url", "https://example.com/a"])

        assert result.exit_code == 0, result.output
        assert "Title     : Heading" in result.output
        assert "Heading Body words here." in result.output
        assert "description : D" in result.output

    def test_fetch_failure_exits_1(self):
        with respx.mock:
            respx.get("https://example.com/gone").mock(return_value=httpx.Response(410))
            result = runner.invoke(app, ["scrape", "--url", "https://example.com/gone"])

        assert result.exit_code == 1
        assert "HTTP 410" in result.output
