from __future__ import annotations

from pathlib import Path

import pytest

from pdf_highlighter.core import paths


@pytest.fixture
def allowed(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    root = tmp_path / "docs"
    root.mkdir()
    monkeypatch.setattr(paths, "SEARCH_DIRECTORIES", [])
    monkeypatch.setattr(paths, "MAX_FILE_SIZE", paths.MAX_FILE_SIZE)
    paths.setup_search_directories(paths.parse_arguments([str(root)]))
    return root


def test_parse_arguments_defaults() -> None:
    args = paths.parse_arguments(["~/Downloads", "--allow-dir", "/tmp"])
    assert args.directories == ["~/Downloads"]
    assert args.allowed_dirs == ["/tmp"]
    assert (args.min_zoom, args.max_zoom, args.zoom_step) == (0.5, 3.0, 0.2)
    assert args.log_level == "INFO"


def test_parse_arguments_rejects_inverted_zoom_range() -> None:
    with pytest.raises(SystemExit):
        paths.parse_arguments(["--min-zoom", "2", "--max-zoom", "1"])


def test_find_file_by_name_and_substring(allowed: Path) -> None:
    (allowed / "paystub-2024.pdf").write_bytes(b"%PDF-1.4")
    (allowed / "fields.json").write_text("{}")
    assert paths.find_file("paystub-2024.pdf") == (allowed / "paystub-2024.pdf").resolve()
    assert paths.find_file("2024") == (allowed / "paystub-2024.pdf").resolve()
    assert paths.find_file("fields.json", paths.DATA_EXTENSIONS) == (allowed / "fields.json").resolve()
    assert paths.find_file("fields.json") is None


def test_files_outside_allowed_directories_are_rejected(allowed: Path, tmp_path: Path) -> None:
    outside = tmp_path / "secret.pdf"
    outside.write_bytes(b"%PDF-1.4")
    assert paths.find_file(str(outside)) is None
    assert paths.find_file("../secret.pdf") is None


def test_resolve_output_path(allowed: Path, tmp_path: Path) -> None:
    assert paths.resolve_output_path("out.json", paths.DATA_EXTENSIONS) == (allowed / "out.json").resolve()
    assert paths.resolve_output_path("out.exe", paths.DATA_EXTENSIONS) is None
    assert paths.resolve_output_path(str(tmp_path / "out.json"), paths.DATA_EXTENSIONS) is None
    assert paths.resolve_output_path("missing/out.json", paths.DATA_EXTENSIONS) is None
