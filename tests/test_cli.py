from __future__ import annotations

import json
from pathlib import Path

import pytest

from responsive_pictures import cli
from responsive_pictures.models import BatchSummary


@pytest.fixture
def content_dir(tmp_path: Path) -> Path:
    root = tmp_path / "content"
    root.mkdir()
    (root / "about.html").write_text("---\npermalink: '/about/'\n---\n", encoding="utf-8")
    return root


def test_defaults() -> None:
    args = cli.parse_args([])
    config = cli.build_config(args)
    assert config.base_url == "http://localhost:8080"
    assert config.output_root.name == "image-optimizations"
    assert config.max_scaled_width == 2500
    assert config.settle_delay == 0.3
    assert not config.measure_intermediate


def test_unreachable_server_fails(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setattr(cli, "check_server", lambda base_url: False)
    assert cli.main(["--output-dir", str(tmp_path / "out")]) == 1


def test_unknown_page_fails_without_processing(monkeypatch, tmp_path: Path, content_dir: Path) -> None:
    calls = []

    async def fake_run(pages, config):
        calls.append(pages)

    monkeypatch.setattr(cli, "run_optimizer", fake_run)
    code = cli.main(
        [
            "--skip-preflight",
            "--content-dir",
            str(content_dir),
            "--output-dir",
            str(tmp_path / "out"),
            "--page",
            "/missing/",
        ]
    )
    assert code == 1
    assert calls == []


def test_runs_batch_and_prints_json(monkeypatch, tmp_path: Path, content_dir: Path, capsys) -> None:
    seen = {}

    async def fake_run(pages, config):
        seen["pages"] = [page.permalink for page in pages]
        seen["config"] = config
        return BatchSummary(
            total_pages=len(pages),
            pages_with_images=1,
            total_images=4,
            above_the_fold_images=1,
            pages_with_errors=0,
            output_dir=config.output_root,
        )

    monkeypatch.setattr(cli, "check_server", lambda base_url: True)
    monkeypatch.setattr(cli, "run_optimizer", fake_run)
    code = cli.main(
        [
            "--content-dir",
            str(content_dir),
            "--output-dir",
            str(tmp_path / "out"),
            "--max-width",
            "2000",
            "--measure-intermediate",
            "--json",
        ]
    )

    assert code == 0
    assert seen["pages"] == ["/about/", "/"]
    assert seen["config"].max_scaled_width == 2000
    assert seen["config"].measure_intermediate
    payload = json.loads(capsys.readouterr().out)
    assert payload["totalPages"] == 2
    assert payload["totalImages"] == 4


def test_filesystem_failure_is_reported(monkeypatch, tmp_path: Path, content_dir: Path) -> None:
    async def fake_run(pages, config):
        raise PermissionError("read-only file system")

    monkeypatch.setattr(cli, "run_optimizer", fake_run)
    code = cli.main(["--skip-preflight", "--content-dir", str(content_dir), "--output-dir", str(tmp_path)])
    assert code == 1
