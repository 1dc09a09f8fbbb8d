# Shared fixtures: small on-disk Laravel-like projects under tmp_path.

from __future__ import annotations

from pathlib import Path

import pytest


@pytest.fixture
def write_file(tmp_path):
    """Write ``content`` to ``tmp_path / rel`` (parents created) and return the path."""

    def _write(rel: str, content: str) -> Path:
        p = tmp_path / rel
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_text(content, encoding="utf-8")
        return p

    return _write


@pytest.fixture
def laravel_project(tmp_path, write_file):
    """Views + app code + lang/ catalogs for en (base) and fr."""
    write_file(
        "resources/views/welcome.blade.php",
        "<h1>{{ __('greeting.hello') }}</h1>\n"
        "<p>@lang('greeting.bye')</p>\n"
        "<span>{{ __($dynamic) }}</span>\n",
    )
    write_file(
        "app/Http/Controllers/HomeController.php",
        "<?php\n\nnamespace App\\Http\\Controllers;\n\n"
        "use Illuminate\\Support\\Facades\\Lang;\n\n"
        "class HomeController\n{\n"
        "    public function index()\n    {\n"
        "        return Lang::get('auth.failed') . trans('Welcome');\n"
        "    }\n}\n",
    )
    write_file(
        "lang/en/greeting.php",
        "<?php\n\nreturn [\n    'hello' => 'Hello',\n    'bye' => 'Bye',\n];\n",
    )
    write_file(
        "lang/en/auth.php",
        "<?php\n\nreturn [\n    'failed' => 'These credentials do not match our records.',\n];\n",
    )
    write_file(
        "lang/fr/greeting.php",
        "<?php\n\nreturn [\n    'hello' => 'Bonjour',\n];\n",
    )
    write_file("lang/fr.json", '{"Welcome": "Bienvenue"}\n')
    return tmp_path
