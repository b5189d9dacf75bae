import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from building_overrides.db import Base, configure_engine  # noqa: E402
from building_overrides.db.session import init_db  # noqa: E402


@pytest.fixture()
def temp_db(tmp_path):
    db_path = tmp_path / "test.db"
    configure_engine(db_path)
    init_db(Base)
    yield db_path


@pytest.fixture()
def store_path(tmp_path):
    return tmp_path / "configs" / "overrides.yml"


@pytest.fixture()
def unwritable_path(tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory", encoding="utf-8")
    return blocker / "overrides.yml"
