import pytest

from statusboard.config import get_default_config
from statusboard.crawler import Sources
from statusboard.database import KeyValueStore

from tests.fakes import FakeContent, FakeGitHub, FakeNpm, MemoryStore


@pytest.fixture
def config():
    return get_default_config()


@pytest.fixture
def github():
    return FakeGitHub()


@pytest.fixture
def npm():
    return FakeNpm()


@pytest.fixture
def content():
    return FakeContent()


@pytest.fixture
def sources(github, npm, content):
    return Sources(github=github, npm=npm, content=content)


@pytest.fixture
def memory_store():
    return MemoryStore()


@pytest.fixture
def kv_store(tmp_path):
    with KeyValueStore(tmp_path / 'index.db') as store:
        yield store
