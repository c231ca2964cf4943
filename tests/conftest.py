# Shared pytest fixtures
from __future__ import annotations

import logging
import tempfile
from collections.abc import Callable
from pathlib import Path

import pytest

from csv_search.logging.init import APP_LOGGER_NAME, reset_logging
from csv_search.models.config_models import EngineConfig

PEOPLE_CSV = "id,name,age\n1,dave,30\n2,dave,40\n"


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        (p / "storage").mkdir()
        monkeypatch.chdir(p)
        monkeypatch.delenv("CSV_SEARCH_STORAGE_ROOT", raising=False)
        yield p


@pytest.fixture(autouse=True)
def _clean_app_logger():
    yield
    # handlers created under capsys point at a stream that is closed afterwards
    reset_logging()
    logger = logging.getLogger(APP_LOGGER_NAME)
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


@pytest.fixture()
def storage_root(temp_workdir: Path) -> Path:
    return temp_workdir / "storage"


@pytest.fixture()
def engine_config(storage_root: Path) -> EngineConfig:
    return EngineConfig(storage_root=storage_root, show_progress=False)


@pytest.fixture()
def write_csv(temp_workdir: Path) -> Callable[..., Path]:
    def _write(text: str, name: str = "data.csv") -> Path:
        path = temp_workdir / "data" / name
        path.write_bytes(text.encode("utf-8"))
        return path
    return _write


@pytest.fixture()
def people_csv(write_csv) -> Path:
    return write_csv(PEOPLE_CSV, "people.csv")


@pytest.fixture()
def sample_config_yaml() -> str:
    return """storage_root: ./storage
chunk_size: 64
batch_size: 2
checkpoint_interval: 2
result_batch_size: 2
row_cache_size: 100
fuzzy_threshold: 1
show_progress: false
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "search.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg
