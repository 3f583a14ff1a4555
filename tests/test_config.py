from __future__ import annotations

import json
from pathlib import Path

import pytest

from grimoire_pdf.config import Config, get_config_from_env, load_config_file, parse_timeout_value

ENV_VARS = (
    "GRIMOIRE_PDF_SOURCE_DIR",
    "GRIMOIRE_PDF_OUTPUT_DIR",
    "GRIMOIRE_PDF_DB_PATH",
    "GRIMOIRE_PDF_MARGINS",
    "GRIMOIRE_PDF_TIMEOUT",
    "GRIMOIRE_PDF_BRAND",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"output_dir": "from-file", "brand": "Casa do Arquivo", "timeout": 30}), encoding="utf-8")
    return path


def test_defaults(tmp_path: Path) -> None:
    config = Config(config_file=tmp_path / "missing.json")

    assert config.get_source_dir() == "grimoires"
    assert config.get_output_dir() == "output"
    assert config.get_page_margins() == "20mm 15mm"
    assert config.get_timeout() == 60.0
    assert config.get_brand() == "Templo do Abismo"
    assert config.get_db_path().endswith("export_state.db")


def test_file_overrides_defaults(config_file: Path) -> None:
    config = Config(config_file=config_file)

    assert config.get_output_dir() == "from-file"
    assert config.get_brand() == "Casa do Arquivo"
    assert config.get_timeout() == 30.0


def test_env_overrides_file(config_file: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("GRIMOIRE_PDF_OUTPUT_DIR", "from-env")
    monkeypatch.setenv("GRIMOIRE_PDF_TIMEOUT", "12.5")

    config = Config(config_file=config_file)

    assert config.get_output_dir() == "from-env"
    assert config.get_timeout() == 12.5
    assert config.get_brand() == "Casa do Arquivo"


def test_cli_overrides_env_and_ignores_unset_flags(config_file: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("GRIMOIRE_PDF_OUTPUT_DIR", "from-env")

    config = Config(cli_args={"output_dir": "from-cli", "brand": None}, config_file=config_file)

    assert config.get_output_dir() == "from-cli"
    assert config.get_brand() == "Casa do Arquivo"


def test_invalid_env_timeout_is_ignored(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("GRIMOIRE_PDF_TIMEOUT", "soon")

    assert "timeout" not in get_config_from_env()


def test_parse_timeout_value() -> None:
    assert parse_timeout_value(" 45 ") == 45.0
    assert parse_timeout_value("0") is None
    assert parse_timeout_value("-3") is None
    assert parse_timeout_value("abc") is None


def test_broken_config_file_is_ignored(tmp_path: Path) -> None:
    path = tmp_path / "config.json"
    path.write_text("{not json", encoding="utf-8")

    assert load_config_file(path) == {}


def test_update_and_to_dict(tmp_path: Path) -> None:
    config = Config(config_file=tmp_path / "missing.json")

    config.update({"brand": "Nova Casa"})
    snapshot = config.to_dict()
    snapshot["brand"] = "Alterado"

    assert config.get("brand") == "Nova Casa"
    assert config.get("nope", "padrão") == "padrão"
