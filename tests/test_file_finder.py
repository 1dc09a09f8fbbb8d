"""Tests for source file enumeration."""

from __future__ import annotations

import logging

from lost_in_translation.services.file_finder import list_files, list_paths


def test_list_paths_filters_by_suffix_and_sorts(write_file, tmp_path):
    write_file("views/b.blade.php", "")
    write_file("views/a.php", "")
    write_file("views/sub/c.php", "")
    write_file("views/readme.md", "")
    write_file("views/script.js", "")
    found = [p.relative_to(tmp_path).as_posix() for p in list_paths([tmp_path / "views"])]
    assert found == ["views/a.php", "views/b.blade.php", "views/sub/c.php"]


def test_overlapping_paths_yield_each_file_once(write_file, tmp_path):
    target = write_file("app/Http/x.php", "")
    found = list_paths([tmp_path / "app", tmp_path / "app" / "Http", target])
    assert len(found) == 1


def test_missing_path_is_skipped_with_warning(tmp_path, caplog):
    with caplog.at_level(logging.WARNING):
        assert list_paths([tmp_path / "nope"]) == []
    assert "Skipping missing path" in caplog.text


def test_list_files_reads_source_files(write_file, tmp_path):
    write_file("v/home.blade.php", "{{ __('a') }}")
    write_file("v/Home.php", "<?php __('b');")
    files = {f.path.name: f for f in list_files([tmp_path / "v"])}
    assert files["home.blade.php"].kind == "blade"
    assert files["Home.php"].kind == "php"
    assert files["Home.php"].text == "<?php __('b');"


def test_custom_extensions(write_file, tmp_path):
    write_file("src/a.inc", "")
    write_file("src/b.php", "")
    found = [p.name for p in list_paths([tmp_path / "src"], extensions=(".inc",))]
    assert found == ["a.inc"]
