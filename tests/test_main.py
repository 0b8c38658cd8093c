from __future__ import annotations

import json
from pathlib import Path

import pytest

from article_agent import main as cli

REPO_CONFIG = str(Path(__file__).resolve().parents[1] / "config" / "pipeline.yaml")


@pytest.fixture(autouse=True)
def _no_dotenv(monkeypatch):
    monkeypatch.setattr(cli, "load_dotenv", lambda **kwargs: False)


def test_offline_dry_run_ranks_sample_topics(tmp_path, capsys):
    code = cli.main(
        ["--config", REPO_CONFIG, "--offline", "--dry-run", "--store", str(tmp_path / "a.json"), "--log-level", "ERROR"]
    )
    out = capsys.readouterr().out
    assert code == 0
    assert out.startswith("1. [")
    assert "https://example.com/ecommerce-trends" in out


def test_candidates_file_dry_run(tmp_path, capsys):
    path = tmp_path / "candidates.json"
    path.write_text(
        json.dumps(
            {
                "results": [
                    {"title": "Short", "url": "https://a.example.com/1", "text": "tiny"},
                    {"title": "Warehouse Slotting for Fast Movers", "url": "https://a.example.com/2",
                     "text": "Inventory placement and fulfillment speed " * 5, "publishedDate": "2025-01-01"},
                ]
            }
        ),
        encoding="utf-8",
    )
    code = cli.main(
        ["--config", REPO_CONFIG, "--candidates", str(path), "--dry-run",
         "--store", str(tmp_path / "a.json"), "--log-level", "ERROR"]
    )
    out = capsys.readouterr().out
    assert code == 0
    assert "Warehouse Slotting for Fast Movers (logistics)" in out
    assert "Short" not in out


def test_invalid_config_exits_with_error(tmp_path):
    bad = tmp_path / "bad.yaml"
    bad.write_text("similarity_threshold: 7\n", encoding="utf-8")
    assert cli.main(["--config", str(bad), "--offline", "--dry-run", "--log-level", "ERROR"]) == 1


def test_missing_api_key_reports_unauthorized(tmp_path, monkeypatch, capsys):
    monkeypatch.delenv("OPENROUTER_API_KEY", raising=False)
    code = cli.main(
        ["--config", REPO_CONFIG, "--offline", "--backend", "openrouter",
         "--store", str(tmp_path / "a.json"), "--log-level", "ERROR"]
    )
    out = capsys.readouterr().out
    assert code == 1
    assert "UNAUTHORIZED" in out


def test_load_candidates_accepts_bare_list(tmp_path):
    path = tmp_path / "c.json"
    path.write_text(json.dumps([{"title": "T", "url": "u", "text": "x", "score": 0.5}]), encoding="utf-8")
    [row] = cli.load_candidates(path)
    assert row.score == 0.5
    assert row.source == "manual"
