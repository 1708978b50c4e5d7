from __future__ import annotations

import importlib.util
from pathlib import Path

from sqlalchemy import create_engine, inspect


SCRIPT = Path(__file__).resolve().parents[1] / "scripts" / "create_orm_tables.py"


def _load():
    spec = importlib.util.spec_from_file_location("create_orm_tables_script", SCRIPT)
    module = importlib.util.module_from_spec(spec)
    assert spec.loader is not None
    spec.loader.exec_module(module)
    return module


def test_refuses_without_flag(tmp_path) -> None:
    target = tmp_path / "catalog.db"
    assert _load().main(["--db-url", f"sqlite:///{target}"]) == 2
    assert not target.exists()


def test_creates_catalog_tables(tmp_path, capsys) -> None:
    url = f"sqlite:///{tmp_path / 'catalog.db'}"

    assert _load().main(["--db-url", url, "--i-understand"]) == 0

    assert "programs, universities" in capsys.readouterr().out
    engine = create_engine(url)
    try:
        tables = set(inspect(engine).get_table_names())
        constraints = inspect(engine).get_unique_constraints("programs")
    finally:
        engine.dispose()
    assert {"universities", "programs"} <= tables
    assert any(c["name"] == "uq_program_university_name" for c in constraints)
