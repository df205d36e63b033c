import importlib
import py_compile
from pathlib import Path

import pytest


PACKAGE_DIR = Path(__file__).resolve().parents[2] / "src" / "livemap"
MODULES = sorted(path.stem for path in PACKAGE_DIR.glob("*.py"))


def test_package_has_modules():
    assert "coordinator" in MODULES
    assert "geocoder" in MODULES


@pytest.mark.parametrize("name", MODULES)
def test_module_compiles(name, tmp_path):
    py_compile.compile(
        str(PACKAGE_DIR / f"{name}.py"),
        cfile=str(tmp_path / f"{name}.pyc"),
        doraise=True,
    )


@pytest.mark.parametrize("name", MODULES)
def test_module_imports(name):
    importlib.import_module(f"livemap.{name}")
