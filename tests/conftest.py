import importlib
import random

import pytest


def import_required(module_name: str):
    """
    Import a project module with a clearer failure message than ModuleNotFoundError.
    """
    try:
        return importlib.import_module(module_name)
    except ModuleNotFoundError as e:
        pytest.fail(
            f"Required module '{module_name}.py' not found. "
            f"Original error: {e}"
        )


class OpenRandom(random.Random):
    """
    Random source whose draws never fall under the wall probability,
    so generated grids have an open interior.
    """

    def random(self) -> float:
        return 0.99


@pytest.fixture
def maze_module():
    return import_required("maze")


@pytest.fixture
def main_module():
    return import_required("main")


@pytest.fixture
def db_module():
    return import_required("db")


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def open_rng():
    return OpenRandom()


@pytest.fixture
def make_session(main_module):
    """
    Factory for hand-ticked sessions; every session is closed at teardown.
    """
    created = []

    def _make(size=5, **kwargs):
        kwargs.setdefault("autotick", False)
        session = main_module.new_session(size, **kwargs)
        created.append(session)
        return session

    yield _make
    for session in created:
        session.close()


@pytest.fixture(params=["runs.json", "runs.db"])
def repo(request, tmp_path, db_module):
    repo = db_module.open_repo(tmp_path / request.param)
    yield repo
    repo.close()
