import pytest
from fastapi.testclient import TestClient

from campaign_importer.main import app

SCENARIO_A_TEMPLATE = "Hello {{name}}! Order {{order_id}} confirmed."
SCENARIO_A_CSV = (
    "phone,name,order_id\n"
    "+15551234567,Alice,ORD-1\n"
    "+15551234567,Alice Dup,ORD-2\n"
    "not-a-phone,Bob,ORD-3\n"
)


@pytest.fixture
def client():
    """FastAPI test client."""
    return TestClient(app)


@pytest.fixture
def scenario_a():
    return SCENARIO_A_TEMPLATE, SCENARIO_A_CSV
