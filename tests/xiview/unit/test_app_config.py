from __future__ import annotations

import os

from xiview.config import load_app_config, load_default_env_files, load_env_file
from xiview.content import DEFAULT_LINES, DEFAULT_FONT_PATH, SINGLE_LINE


def test_defaults() -> None:
    config = load_app_config(env={})

    assert config.font_path == DEFAULT_FONT_PATH
    assert config.lines == DEFAULT_LINES
    assert config.debug_glyph_boxes is False
    assert config.core_enabled is False
    assert config.core_executable == "xi-core"
    assert config.core_args == ()


def test_overrides() -> None:
    config = load_app_config(
        env={
            "XIVIEW_FONT_PATH": "/fonts/Other.ttf",
            "XIVIEW_DEBUG_GLYPH_BOXES": "yes",
            "XIVIEW_TEXT_MODE": "single",
            "XIVIEW_CORE_ENABLED": "1",
            "XIVIEW_CORE_EXECUTABLE": "/opt/xi/xi-core",
            "XIVIEW_CORE_ARGS": "--verbose, --flag",
            "XIVIEW_CORE_FILE": "notes.txt",
        }
    )

    assert config.font_path == "/fonts/Other.ttf"
    assert config.debug_glyph_boxes is True
    assert config.lines == SINGLE_LINE
    assert config.core_enabled is True
    assert config.core_executable == "/opt/xi/xi-core"
    assert config.core_args == ("--verbose", "--flag")
    assert config.core_file == "notes.txt"


def test_custom_lines_take_precedence() -> None:
    config = load_app_config(env={"XIVIEW_TEXT_LINES": "one| two |", "XIVIEW_TEXT_MODE": "single"})
    assert config.lines == ("one", " two ")


def test_load_env_file_parses_quotes_and_comments(tmp_path, monkeypatch) -> None:
    env_file = tmp_path / ".env.xiview"
    env_file.write_text(
        "# comment\nXIVIEW_TEST_A='quoted value'\nXIVIEW_TEST_B=plain\nnot a pair\n=novalue\n",
        encoding="utf-8",
    )
    monkeypatch.setenv("XIVIEW_TEST_A", "placeholder")
    monkeypatch.delenv("XIVIEW_TEST_A")
    monkeypatch.setenv("XIVIEW_TEST_B", "existing")

    load_env_file(str(env_file), override_existing=False)

    assert os.environ["XIVIEW_TEST_A"] == "quoted value"
    assert os.environ["XIVIEW_TEST_B"] == "existing"


def test_later_env_files_win(tmp_path, monkeypatch) -> None:
    first = tmp_path / "first.env"
    second = tmp_path / "second.env"
    first.write_text("XIVIEW_TEST_C=first\n", encoding="utf-8")
    second.write_text("XIVIEW_TEST_C=second\n", encoding="utf-8")
    monkeypatch.setenv("XIVIEW_TEST_C", "placeholder")

    load_default_env_files(paths=(str(first), str(second), str(tmp_path / "missing.env")))

    assert os.environ["XIVIEW_TEST_C"] == "second"
