"""Tests for the missing key finder (scan orchestration)."""

from __future__ import annotations

from pathlib import Path

import pytest

from lost_in_translation.domain.models import ScanPhase, SourceFile
from lost_in_translation.parsing.call_matcher import CallTargets
from lost_in_translation.parsing.errors import CatalogError, SourceParseError, SourceReadError
from lost_in_translation.services.locale_catalog import InMemoryLocaleCatalog
from lost_in_translation.services.missing_key_finder import (
    MissingKeyFinder,
    find_missing_keys,
    scan_source,
)


def _src(name: str, code: str, kind: str = "php") -> SourceFile:
    return SourceFile(path=Path(name), text=code, kind=kind)


SCENARIO = [
    _src("a.src", "<?php\necho trans('greeting.hello');\necho trans($var);\n"),
    _src("b.src", "<?php\necho trans('greeting.hello');\necho trans('greeting.bye');\n"),
]


def test_end_to_end_scenario():
    warnings = []
    catalog = InMemoryLocaleCatalog({"fr": {"greeting.hello"}})
    finder = MissingKeyFinder(catalog, "fr", max_workers=1, on_warning=warnings.append)
    result = finder.scan(SCENARIO)
    assert result.reported == ["greeting.hello", "greeting.bye"]
    assert result.missing_set == {"greeting.bye"}
    assert len(warnings) == 1
    w = warnings[0]
    assert (w.path, w.line, w.raw_argument, w.reason) == ("a.src", 3, "$var", "non-string-argument")
    assert "skipping dynamic language key: `$var`" in w.describe()
    assert result.warnings == warnings
    assert result.files_scanned == 2
    assert finder.phase is ScanPhase.DONE


def test_literal_keys_are_candidates_before_locale_filtering():
    catalog = InMemoryLocaleCatalog({"fr": {"literal.key"}})
    result = MissingKeyFinder(catalog, "fr", max_workers=1).collect(
        [_src("x.php", "<?php\n__('literal.key');\n")]
    )
    assert result.reported == ["literal.key"]
    assert result.missing == []


def test_duplicate_keys_reported_once():
    files = [
        _src("a.php", "<?php\n__('same'); __('same'); trans('same');\n"),
        _src("b.php", "<?php\n__('same');\n"),
    ]
    catalog = InMemoryLocaleCatalog({"fr": set()})
    result = MissingKeyFinder(catalog, "fr", max_workers=1).scan(files)
    assert result.reported == ["same"]
    assert result.missing == ["same"]


def test_scan_is_idempotent():
    catalog = InMemoryLocaleCatalog({"fr": {"greeting.hello"}})
    finder = MissingKeyFinder(catalog, "fr", max_workers=1)
    first = finder.scan(SCENARIO)
    second = finder.scan(SCENARIO)
    assert first.missing_set == second.missing_set
    assert first.missing == second.missing


def test_parallel_scan_matches_sequential_order():
    files = [
        _src(f"f{i}.php", f"<?php\n__('k.{i}.a');\n__('shared');\n__('k.{i}.b');\n") for i in range(12)
    ]
    catalog = InMemoryLocaleCatalog({"fr": {"shared"}})
    sequential = MissingKeyFinder(catalog, "fr", max_workers=1).scan(files)
    parallel = MissingKeyFinder(catalog, "fr", max_workers=4).scan(files)
    assert parallel.reported == sequential.reported
    assert parallel.missing == sequential.missing
    assert sequential.reported[:3] == ["k.0.a", "shared", "k.0.b"]


def test_sorted_and_unsorted_order():
    files = [_src("x.php", "<?php\n__('b.key'); __('a.key');\n")]
    catalog = InMemoryLocaleCatalog({"fr": set()})
    result = MissingKeyFinder(catalog, "fr", max_workers=1).scan(files)
    assert result.ordered(sort=True) == ["a.key", "b.key"]
    assert result.ordered() == ["b.key", "a.key"]
    assert find_missing_keys(files, "fr", catalog, sort=True) == ["a.key", "b.key"]
    assert find_missing_keys(files, "fr", catalog) == ["b.key", "a.key"]


@pytest.mark.parametrize("workers", [1, 3])
def test_parse_error_aborts_scan(workers):
    files = [
        _src("ok.php", "<?php\n__('fine');\n"),
        _src("broken.php", "<?php\n__('oops';\n"),
        _src("later.php", "<?php\n__('later');\n"),
    ]
    catalog = InMemoryLocaleCatalog({"fr": set()})
    finder = MissingKeyFinder(catalog, "fr", max_workers=workers)
    with pytest.raises(SourceParseError) as excinfo:
        finder.scan(files)
    assert excinfo.value.path == "broken.php"
    assert finder.phase is ScanPhase.SCANNING


def test_catalog_errors_propagate():
    catalog = InMemoryLocaleCatalog({"fr": set()})
    with pytest.raises(CatalogError):
        MissingKeyFinder(catalog, "xx", max_workers=1).scan(SCENARIO)


def test_no_catalog_lookup_for_rejected_keys():
    asked = []

    class RecordingCatalog:
        def has(self, key, locale):
            asked.append((key, locale))
            return False

    files = [_src("x.php", "<?php\n__($a); __(); __('real');\n")]
    result = MissingKeyFinder(RecordingCatalog(), "fr", max_workers=1).scan(files)
    assert asked == [("real", "fr")]
    assert [w.reason for w in result.warnings] == ["non-string-argument", "missing-argument"]


def test_blade_files_are_lowered(write_file):
    view = write_file(
        "views/home.blade.php",
        "<h1>{{ __('home.title') }}</h1>\n@lang('home.subtitle')\n{{ trans($x) }}\n",
    )
    catalog = InMemoryLocaleCatalog({"fr": {"home.title"}})
    result = MissingKeyFinder(catalog, "fr", max_workers=1).scan([view])
    assert result.reported == ["home.title", "home.subtitle"]
    assert result.missing == ["home.subtitle"]
    assert result.warnings[0].line == 3


def test_scan_source_with_custom_targets():
    scan = scan_source(
        _src("x.php", "<?php\nt('custom'); __('ignored');\n"),
        CallTargets(functions=frozenset({"t"}), static_calls=frozenset(), method_calls=frozenset()),
    )
    assert scan.keys == ["custom"]
    assert scan.call_sites == 1


def test_progress_events():
    events = []
    catalog = InMemoryLocaleCatalog({"fr": set()})
    MissingKeyFinder(catalog, "fr", max_workers=1, on_progress=events.append).scan(SCENARIO)
    scanning = [e for e in events if e.phase is ScanPhase.SCANNING]
    assert [(e.current, e.total) for e in scanning] == [(1, 2), (2, 2)]
    assert scanning[0].path == "a.src"


def test_blade_if_condition_keys_are_found():
    scan = scan_source(
        _src("v.blade.php", "@if(__('cond.key') === 'x') yes @endif\n", kind="blade"),
        CallTargets(),
    )
    assert scan.keys == ["cond.key"]


def test_blade_component_binding_keys_are_found():
    scan = scan_source(
        _src("v.blade.php", "<x-alert :title=\"__('comp.title')\" />\n", kind="blade"),
        CallTargets(),
    )
    assert scan.keys == ["comp.title"]


def test_blade_sitemap_with_xml_declaration():
    scan = scan_source(
        _src("sitemap.blade.php", '<?xml version="1.0"?>\n<urlset>{{ __(\'sitemap.title\') }}</urlset>\n', kind="blade"),
        CallTargets(),
    )
    assert scan.keys == ["sitemap.title"]


@pytest.mark.parametrize("workers", [1, 3])
def test_unreadable_source_aborts_scan(tmp_path, workers):
    bad = tmp_path / "bad.php"
    bad.write_bytes(b"<?php\n__('caf\xe9');\n")
    good = tmp_path / "good.php"
    good.write_text("<?php\n__('fine');\n", encoding="utf-8")
    finder = MissingKeyFinder(InMemoryLocaleCatalog({"fr": set()}), "fr", max_workers=workers)
    with pytest.raises(SourceReadError) as excinfo:
        finder.scan([good, bad])
    assert excinfo.value.path == str(bad)
