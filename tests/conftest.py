import sys
import os

import pytest

# Ensure repo root on sys.path for imports like `nodex...`
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

os.environ.setdefault("SUPABASE_URL", "http://localhost:54321")
os.environ.setdefault("SUPABASE_KEY", "test-anon-key")

from nodex.core.config import get_settings  # noqa: E402
from nodex.db.store import EntityStore  # noqa: E402
from nodex.features.workflow.service import WorkflowService  # noqa: E402

from tests.fakesupabase import FakeSupabase, campus_tables  # noqa: E402


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def fake():
    return FakeSupabase(campus_tables())


@pytest.fixture
def store(fake):
    return EntityStore(client_factory=fake.factory, timeout=1.0)


@pytest.fixture
def workflow(store):
    return WorkflowService(store, settings=get_settings())
