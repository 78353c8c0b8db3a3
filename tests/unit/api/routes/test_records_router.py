"""Unit tests for the generated records router."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi import status
from fastapi.testclient import TestClient

from apibuilder.domain.entities import Collection, CollectionItem, Field, FieldType
from apibuilder.domain.services import RecordValidationFailed, RecordValidator
from apibuilder.infrastructure.api.app import app
from apibuilder.infrastructure.api.dependencies import collection_not_found
from apibuilder.infrastructure.persistence.database import get_db_session

ROUTER = "apibuilder.infrastructure.api.routes.records_router"

POSTS = Collection(
    id="c_posts",
    name="Posts",
    slug="posts",
    fields=[Field(id="f1", name="title", type=FieldType.STRING, required=True)],
)


@pytest.fixture
def session_mock():
    session = AsyncMock()
    app.dependency_overrides[get_db_session] = lambda: session
    yield session
    app.dependency_overrides = {}


@pytest.fixture
def client(session_mock):
    """Create test client."""
    return TestClient(app, raise_server_exceptions=False)


@patch(f"{ROUTER}.RecordService")
@patch(f"{ROUTER}.resolve_collection_route", new_callable=AsyncMock)
def test_list_records(mock_resolve, mock_service_cls, client):
    mock_resolve.return_value = POSTS
    service = MagicMock()
    service.get_items = AsyncMock(
        return_value=[CollectionItem(id="i1", collection_id="c_posts", data={"title": "Hi"})]
    )
    service.populate = AsyncMock()
    mock_service_cls.return_value = service

    response = client.get("/api/posts")

    assert response.status_code == status.HTTP_200_OK
    body = response.json()
    assert body["success"] is True
    assert body["data"][0]["id"] == "i1"
    assert body["data"][0]["collectionId"] == "c_posts"
    assert body["meta"] == {"total": 1, "collection": "Posts"}
    service.populate.assert_not_called()


@patch(f"{ROUTER}.RecordService")
@patch(f"{ROUTER}.resolve_collection_route", new_callable=AsyncMock)
def test_create_record_validation_error(mock_resolve, mock_service_cls, client, session_mock):
    mock_resolve.return_value = POSTS
    result = RecordValidator.validate(POSTS.fields, {})
    service = MagicMock()
    service.create_item = AsyncMock(side_effect=RecordValidationFailed(result))
    mock_service_cls.return_value = service

    response = client.post("/api/posts", json={})

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    body = response.json()
    assert body["error"] == "Missing required fields"
    assert body["code"] == "VALIDATION_ERROR"
    assert body["fields"] == ["title"]
    session_mock.commit.assert_not_called()


@patch(f"{ROUTER}.RecordService")
@patch(f"{ROUTER}.resolve_collection_route", new_callable=AsyncMock)
def test_create_record_commits(mock_resolve, mock_service_cls, client, session_mock):
    mock_resolve.return_value = POSTS
    service = MagicMock()
    service.create_item = AsyncMock(
        return_value=CollectionItem(id="i1", collection_id="c_posts", data={"title": "Hi"})
    )
    mock_service_cls.return_value = service

    response = client.post("/api/posts", json={"title": "Hi"})

    assert response.status_code == status.HTTP_201_CREATED
    assert response.json()["data"]["data"] == {"title": "Hi"}
    session_mock.commit.assert_awaited_once()


@patch(f"{ROUTER}.resolve_collection_route", new_callable=AsyncMock)
def test_unknown_collection(mock_resolve, client):
    mock_resolve.return_value = collection_not_found()

    response = client.delete("/api/ghosts/i1")

    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json() == {"error": "Collection not found", "code": "NOT_FOUND"}


@patch(f"{ROUTER}.RecordService")
@patch(f"{ROUTER}.resolve_collection_route", new_callable=AsyncMock)
def test_missing_item(mock_resolve, mock_service_cls, client):
    mock_resolve.return_value = POSTS
    service = MagicMock()
    service.get_item = AsyncMock(return_value=None)
    mock_service_cls.return_value = service

    response = client.get("/api/posts/i404")

    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json()["error"] == "Item not found"


@patch(f"{ROUTER}.RecordService")
@patch(f"{ROUTER}.resolve_collection_route", new_callable=AsyncMock)
def test_unexpected_error_returns_internal_error(mock_resolve, mock_service_cls, client):
    mock_resolve.return_value = POSTS
    service = MagicMock()
    service.get_items = AsyncMock(side_effect=RuntimeError("disk on fire"))
    mock_service_cls.return_value = service

    response = client.get("/api/posts")

    assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
    body = response.json()
    assert body == {"error": "Internal server error", "code": "INTERNAL_ERROR"}
    assert "disk on fire" not in response.text


def test_non_object_body_is_rejected(client):
    response = client.post("/api/posts", json=["not", "an", "object"])

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["code"] == "VALIDATION_ERROR"
