"""Tests for the ``pages`` command-line interface.

The command functions are called directly so the tests can inspect printed
output and exit status without spawning a subprocess.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from pagesmith import cli


def _write_site(tmp_path: Path, *, body: str = "Hello.\n") -> Path:
    content_dir = tmp_path / "content"
    (content_dir / "blog").mkdir(parents=True)
    (content_dir / "about.md").write_text(
        f'+++\ntitle = "about me"\n+++\n{body}', encoding="utf-8"
    )
    (content_dir / "blog" / "first.md").write_text(
        '+++\ntitle = "First"\ndate = 2023-05-16\n+++\nPost.\n', encoding="utf-8"
    )
    config_path = tmp_path / "site.yaml"
    config_path.write_text("title: Field notes\nfeed: false\n", encoding="utf-8")
    return config_path


def test_build_prints_written_paths(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    config_path = _write_site(tmp_path)
    cli.build(config=config_path)
    lines = capsys.readouterr().out.splitlines()
    assert all(line.startswith("wrote ") for line in lines), lines
    assert any(line.endswith("about/index.html") for line in lines)
    assert (tmp_path / "public" / "blog" / "first" / "index.html").exists()


def test_build_honours_output_override(tmp_path: Path) -> None:
    config_path = _write_site(tmp_path)
    cli.build(config=config_path, output_dir=tmp_path / "preview", jobs=2)
    assert (tmp_path / "preview" / "index.html").exists()
    assert not (tmp_path / "public").exists()


def test_check_reports_counts(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    config_path = _write_site(tmp_path)
    cli.check(config=config_path)
    assert capsys.readouterr().out.strip() == "ok: 4 pages, 1 posts"
    assert not (tmp_path / "public").exists()


def test_content_error_exits_non_zero(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    config_path = _write_site(tmp_path, body="A claim[^1].\n")
    with pytest.raises(SystemExit) as excinfo:
        cli.build(config=config_path)
    assert excinfo.value.code == 1
    err = capsys.readouterr().err
    assert err.startswith("error: UnresolvedFootnote in about:"), err
    assert not (tmp_path / "public").exists()


def test_missing_config_exits_non_zero(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    with pytest.raises(SystemExit):
        cli.check(config=tmp_path / "absent.yaml")
    assert "not found" in capsys.readouterr().err
