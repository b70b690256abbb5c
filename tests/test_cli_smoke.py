from __future__ import annotations

import shutil
from pathlib import Path

import orjson
import pytest

from cli import main


def _copy_php_app_fixture(root: Path) -> None:
    fixture_repo = Path(__file__).parent / "fixtures" / "php_app"
    shutil.copytree(fixture_repo, root)


@pytest.fixture
def php_app(tmp_path: Path) -> Path:
    repo_root = tmp_path / "repo"
    _copy_php_app_fixture(repo_root)
    return repo_root


def test_find_usages_json(php_app: Path, capsys: pytest.CaptureFixture[str]) -> None:
    exit_code = main(
        ["find-usages", "App\\Models\\User", "--path", str(php_app), "--format", "json"]
    )

    assert exit_code == 0
    payload = orjson.loads(capsys.readouterr().out)
    assert [(Path(row["file"]).name, row["line"], row["type"]) for row in payload] == [
        ("UserService.php", 10, "type-declaration"),
        ("UserService.php", 14, "static-call"),
        ("UserService.php", 15, "instantiation"),
        ("UserService.php", 18, "type-declaration"),
        ("UserService.php", 20, "instanceof-check"),
        ("UserService.php", 24, "class-constant-fetch"),
    ]
    assert {row["confidence"] for row in payload} == {"CERTAIN"}
    assert payload[2]["code"] == "return new Account($name);"


def test_find_usages_skips_vendor_and_broken_files(
    php_app: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    exit_code = main(
        ["find-usages", "App\\Models\\User", "--path", str(php_app), "--format", "json"]
    )

    assert exit_code == 0
    captured = capsys.readouterr()
    files = {Path(row["file"]).name for row in orjson.loads(captured.out)}
    assert "Ignored.php" not in files
    assert "Broken.php" not in files
    assert "1 of 4 file(s) could not be analyzed" in captured.err


def test_find_usages_method_text_output(
    php_app: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    exit_code = main(
        ["find-usages", "App\\Models\\User::getName", "--path", str(php_app)]
    )

    assert exit_code == 0
    out = capsys.readouterr().out
    assert out.startswith("Found 2 usage(s):")
    assert "(confidence: POSSIBLE, type: method-call)" in out
    assert "  > 7: $target->$method();" in out
    assert "  > 21: return $user->getName();" in out


def test_find_usages_min_confidence_filters(
    php_app: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    exit_code = main(
        [
            "find-usages",
            "App\\Models\\User::getName",
            "--path",
            str(php_app),
            "-c",
            "certain",
        ]
    )

    assert exit_code == 0
    assert capsys.readouterr().out == "No symbol usages found.\n"


def test_find_usages_table_output(
    php_app: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    exit_code = main(
        [
            "find-usages",
            "App\\Models\\User",
            "--path",
            str(php_app / "src" / "Services"),
            "--format",
            "table",
        ]
    )

    assert exit_code == 0
    out = capsys.readouterr().out
    assert out.startswith("Found 6 usage(s):")
    assert "UserService.php" in out


def test_find_usages_exclude_path(
    php_app: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    exit_code = main(
        [
            "find-usages",
            "App\\Models\\User",
            "--path",
            str(php_app),
            "--exclude",
            str(php_app / "src" / "Services"),
            "--format",
            "json",
        ]
    )

    assert exit_code == 0
    assert orjson.loads(capsys.readouterr().out) == []


def test_find_usages_defaults_to_current_directory(
    php_app: Path,
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    monkeypatch.chdir(php_app)

    exit_code = main(["find-usages", "App\\Models\\User", "--format", "json"])

    assert exit_code == 0
    assert len(orjson.loads(capsys.readouterr().out)) == 6


def test_find_usages_config_applies(
    php_app: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    (php_app / "phpusage.toml").write_text(
        'exclude = ["src/Services/UserService.php"]\n', encoding="utf-8"
    )

    exit_code = main(
        ["find-usages", "App\\Models\\User", "--path", str(php_app), "--format", "json"]
    )

    assert exit_code == 0
    assert orjson.loads(capsys.readouterr().out) == []


def test_invalid_config_exits_with_2(
    php_app: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    (php_app / "phpusage.toml").write_text("unknown = 1\n", encoding="utf-8")

    exit_code = main(["find-usages", "App\\Models\\User", "--path", str(php_app)])

    assert exit_code == 2
    assert "Invalid config" in capsys.readouterr().err


def test_index_lists_files(php_app: Path, capsys: pytest.CaptureFixture[str]) -> None:
    exit_code = main(["index", str(php_app)])

    assert exit_code == 0
    names = [Path(line).name for line in capsys.readouterr().out.splitlines()]
    assert names == ["Broken.php", "User.php", "Dynamic.php", "UserService.php"]


def test_index_stats(php_app: Path, capsys: pytest.CaptureFixture[str]) -> None:
    exit_code = main(["index", str(php_app), "--stats"])

    assert exit_code == 0
    assert capsys.readouterr().out.splitlines() == [
        "files: 4",
        "symbols: 9",
        "errors: 1",
        "  syntax: 1",
    ]


def test_find_usages_short_flags(
    php_app: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    exit_code = main(
        [
            "find-usages",
            "App\\Models\\User",
            "-p",
            str(php_app),
            "-e",
            str(php_app / "src" / "Models"),
            "-f",
            "json",
        ]
    )

    assert exit_code == 0
    assert len(orjson.loads(capsys.readouterr().out)) == 6


def test_dynamic_usages_hidden_unless_requested(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    (tmp_path / "callbacks.php").write_text(
        "<?php\n\n$user->getName(); call_user_func($cb);\n", encoding="utf-8"
    )
    argv = ["find-usages", "App\\Models\\User::getName", "-p", str(tmp_path)]

    assert main([*argv, "-f", "json"]) == 0
    assert orjson.loads(capsys.readouterr().out) == []

    assert main([*argv, "-f", "json", "-c", "dynamic"]) == 0
    payload = orjson.loads(capsys.readouterr().out)
    assert [(row["line"], row["confidence"]) for row in payload] == [(3, "DYNAMIC")]


def test_version_lists_parser_libraries(capsys: pytest.CaptureFixture[str]) -> None:
    exit_code = main(["version"])

    assert exit_code == 0
    lines = capsys.readouterr().out.splitlines()
    assert lines[0].startswith("phpusage ")
    assert lines[1].startswith("Python ")
    assert [line.split()[0] for line in lines[2:]] == ["tree-sitter", "tree-sitter-php"]
