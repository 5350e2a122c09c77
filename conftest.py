"""
Shared pytest fixtures for the Catering Quotes test suite.

Every test gets its own SQLite file under tmp_path, initialized with the
four tables and the default settings.
"""
import os
import base64
from datetime import datetime

import pytest


# ── Temp database (per-test isolation) ────────────────────────────────────────

@pytest.fixture(autouse=True)
def temp_data_dir(tmp_path, monkeypatch):
    """Redirect the data dir and database to an isolated tmp directory."""
    data = str(tmp_path / "data")
    os.makedirs(data, exist_ok=True)

    from catering.core import db, paths
    monkeypatch.setattr(paths, "DATA_DIR", data)
    monkeypatch.setattr(paths, "LOG_DIR", os.path.join(data, "logs"))
    monkeypatch.setattr(db, "DB_PATH", os.path.join(data, "catering.db"))
    db.startup()
    return data


# ── Flask test client ─────────────────────────────────────────────────────────

def _basic_auth_header(user="catering", pw="changeme"):
    creds = base64.b64encode(f"{user}:{pw}".encode()).decode()
    return {"Authorization": f"Basic {creds}"}


class AuthenticatedClient:
    """Wraps Flask test client to add Basic Auth headers to every request."""
    def __init__(self, client, headers):
        self._client = client
        self._headers = headers

    def get(self, *args, **kwargs):
        kwargs.setdefault("headers", {}).update(self._headers)
        return self._client.get(*args, **kwargs)

    def post(self, *args, **kwargs):
        kwargs.setdefault("headers", {}).update(self._headers)
        return self._client.post(*args, **kwargs)

    def put(self, *args, **kwargs):
        kwargs.setdefault("headers", {}).update(self._headers)
        return self._client.put(*args, **kwargs)

    def delete(self, *args, **kwargs):
        kwargs.setdefault("headers", {}).update(self._headers)
        return self._client.delete(*args, **kwargs)


@pytest.fixture
def app(temp_data_dir, monkeypatch):
    """Create Flask app configured for testing."""
    monkeypatch.setenv("DASH_USER", "catering")
    monkeypatch.setenv("DASH_PASS", "changeme")
    monkeypatch.delenv("ENABLE_RETENTION_SWEEP", raising=False)

    import logging_config
    monkeypatch.setattr(logging_config, "LOG_DIR", os.path.join(temp_data_dir, "logs"))

    from app import create_app
    flask_app = create_app(start_background=False)
    flask_app.config["TESTING"] = True
    return flask_app


@pytest.fixture
def client(app):
    """Authenticated Flask test client (HTTP Basic Auth on every request)."""
    with app.test_client() as c:
        yield AuthenticatedClient(c, _basic_auth_header())


@pytest.fixture
def anon_client(app):
    """Unauthenticated test client."""
    with app.test_client() as c:
        yield c


# ── Sample data factories ─────────────────────────────────────────────────────

@pytest.fixture
def nuggets_item():
    return {"category": "Trays", "name": "Nuggets Tray - Small",
            "pickup_price": 32.00, "delivery_price": 38.00}


@pytest.fixture
def seed_menu(nuggets_item):
    """Menu with three items across two categories. Returns {name: id}."""
    from catering.core.menu import add_menu_item
    ids = {}
    for item in (
        nuggets_item,
        {"category": "Trays", "name": "Nuggets Tray - Large",
         "pickup_price": 58.00, "delivery_price": 66.00},
        {"category": "Drinks", "name": "Lemonade Gallon",
         "pickup_price": 12.50, "delivery_price": 14.00},
    ):
        ids[item["name"]] = add_menu_item(item)
    return ids


@pytest.fixture
def sample_draft():
    """A priced Pickup draft: 2 x Nuggets Tray - Small at 8.25% tax."""
    return {
        "customer_name": "Acme Corp",
        "contact_name": "Jane Smith",
        "customer_email": "jane@acme.test",
        "order_type": "Pickup",
        "delivery_address": "",
        "location_name": "Main Street",
        "event_time": "11:30 AM",
        "tax_exempt": False,
        "line_items": [
            {"quantity": 2, "description": "Nuggets Tray - Small",
             "unit_price": 32.00, "amount": 64.00},
        ],
        "subtotal": 64.00,
        "tax_rate": 8.25,
        "tax_amount": 5.28,
        "total": 69.28,
    }


@pytest.fixture
def fixed_now():
    return datetime(2026, 3, 14, 10, 30, 0)
