import pytest
from sqlalchemy.exc import OperationalError

from app import bootstrap_store, create_app
from conftest import TEST_CONFIG
from errors import StorageUnavailable
from models import db
from services import catalog


def _storage_down(*args, **kwargs):
    raise OperationalError("CREATE TABLE users", {}, Exception("unable to open database file"))


def test_bootstrap_reports_storage_unavailable(app, monkeypatch):
    monkeypatch.setattr(db, "create_all", _storage_down)
    with app.app_context():
        with pytest.raises(StorageUnavailable):
            bootstrap_store(app)


# the app still starts and answers every store call with 503
def test_app_keeps_serving_when_store_cannot_start(monkeypatch):
    monkeypatch.setattr(db, "create_all", _storage_down)
    app = create_app(dict(TEST_CONFIG))
    client = app.test_client()

    response = client.get("/api/shows")
    assert response.status_code == 503
    assert response.get_json() == {"success": False, "message": "Database not accessible", "details": {}}


def test_storage_error_answers_503_then_recovers(client, monkeypatch):
    real_list_products = catalog.list_products
    calls = []

    def flaky(session):
        calls.append(1)
        if len(calls) == 1:
            raise OperationalError("SELECT products", {}, Exception("database is locked"))
        return real_list_products(session)

    monkeypatch.setattr(catalog, "list_products", flaky)

    assert client.get("/api/products").status_code == 503
    response = client.get("/api/products")
    assert response.status_code == 200
    assert len(response.get_json()["products"]) == 10


@pytest.mark.parametrize("missing", ["SECRET_KEY", "JWT_SECRET_KEY", "PEPPER"])
def test_secrets_are_required_outside_testing(missing):
    config = dict(TEST_CONFIG, TESTING=False)
    config[missing] = ""
    with pytest.raises(RuntimeError, match=missing):
        create_app(config)
