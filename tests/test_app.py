import logging

import mongomock
from fastapi.testclient import TestClient

import main
from main import setup_logging


def test_root(client):
    resp = client.get("/")
    assert resp.status_code == 200
    assert resp.json() == {"message": "PlayApp backend is running"}


def test_database_probe(client, mongo_db):
    mongo_db["user"].insert_one({"username": "probe"})

    resp = client.get("/test")

    assert resp.status_code == 200
    info = resp.json()
    assert info["database_connected"] is True
    assert "user" in info["collections"]


def test_unknown_route_uses_error_envelope(client):
    resp = client.get("/does-not-exist")

    assert resp.status_code == 404
    assert resp.json()["success"] is False
    assert resp.json()["statusCode"] == 404


def test_setup_logging_installs_single_handler():
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    try:
        setup_logging("debug")
        setup_logging("warning")
        assert len(root.handlers) == 1
        assert root.level == logging.WARNING
    finally:
        root.handlers[:] = saved_handlers
        root.setLevel(saved_level)


def test_startup_configures_logging_and_indexes(monkeypatch):
    fresh_db = mongomock.MongoClient()["playapp_startup"]
    monkeypatch.setattr(main, "get_db", lambda: fresh_db)
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    try:
        with TestClient(main.app) as client:
            assert client.get("/").status_code == 200
        assert root.level == logging.INFO
        assert len(root.handlers) == 1
        assert "username_1" in fresh_db["user"].index_information()
    finally:
        root.handlers[:] = saved_handlers
        root.setLevel(saved_level)
