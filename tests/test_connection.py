"""
Unit tests for the server's MongoDB connection helpers.
"""

from unittest.mock import MagicMock, patch

import pytest

import db.connection as connection


@pytest.fixture(autouse=True)
def no_client():
    connection._client = None
    yield
    connection._client = None


class TestConnection:
    """Tests for lazy client creation and collection lookup."""

    def test_client_created_once(self):
        with patch("db.connection.AsyncIOMotorClient") as client_class:
            first = connection.get_client()
            second = connection.get_client()

        assert first is second
        client_class.assert_called_once()
        assert client_class.call_args.kwargs == {"tz_aware": True}

    def test_collection_from_configured_database(self):
        client = MagicMock()
        with patch("db.connection.AsyncIOMotorClient", return_value=client):
            connection.get_collection("orders")

        client.__getitem__.assert_called_once_with(connection.get_config().mongo_db)
        client.__getitem__.return_value.__getitem__.assert_called_once_with("orders")

    def test_collection_database_override(self):
        client = MagicMock()
        with patch("db.connection.AsyncIOMotorClient", return_value=client):
            connection.get_collection("orders", database="reports")

        client.__getitem__.assert_called_once_with("reports")

    def test_close_client(self):
        client = MagicMock()
        with patch("db.connection.AsyncIOMotorClient", return_value=client):
            connection.get_client()
            connection.close_client()

        client.close.assert_called_once()
        assert connection._client is None
