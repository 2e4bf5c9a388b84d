"""Test error handling functionality.

Verifies that custom exceptions are properly raised and handled,
returning appropriate error responses.
"""
import json

import pytest
from core.error_handlers import create_error_response
from core.exceptions import (
    ConflictError,
    ForbiddenError,
    NotFoundError,
    UnauthenticatedError,
    ValidationError,
)
from api.recipes import approve_recipe, get_recipe, reject_recipe
from schemas import RejectRequest
from services.moderation import recipe_moderation

from conftest import auth_headers


def test_recipe_not_found_raises_404(db):
    """Test that requesting non-existent recipe raises NotFoundError."""
    with pytest.raises(NotFoundError) as exc_info:
        get_recipe(recipe_id=99999, db=db)
    assert "Recipe" in str(exc_info.value.message)
    assert exc_info.value.status_code == 404


def test_approve_missing_recipe_by_plain_user_is_404(db, principals):
    with pytest.raises(NotFoundError):
        approve_recipe(recipe_id=99999, principal=principals["other"], db=db)


def test_reject_without_reason_raises_validation_error(db, principals):
    recipe = recipe_moderation.submit(
        db, principals["owner"], title="Soup", ingredients=["water"], instructions="Boil", category="plats",
    )
    with pytest.raises(ValidationError) as exc_info:
        reject_recipe(recipe_id=recipe.id, payload=RejectRequest(), principal=principals["admin"], db=db)
    assert "reason" in str(exc_info.value.message).lower()
    assert exc_info.value.status_code == 400


def test_blank_reject_by_plain_user_is_forbidden(db, principals):
    recipe = recipe_moderation.submit(
        db, principals["owner"], title="Soup", ingredients=["water"], instructions="Boil", category="plats",
    )
    with pytest.raises(ForbiddenError):
        reject_recipe(recipe_id=recipe.id, payload=RejectRequest(reason=" "), principal=principals["other"], db=db)
    with pytest.raises(NotFoundError):
        reject_recipe(recipe_id=99999, payload=RejectRequest(), principal=principals["other"], db=db)


def test_exception_classes_have_proper_attributes():
    """Test that custom exception classes have expected attributes."""
    exc = NotFoundError("Recipe", 123)
    assert exc.status_code == 404
    assert exc.kind == "not_found"
    assert "Recipe" in exc.message
    assert "123" in exc.message

    exc = ValidationError("Invalid input", field="rating")
    assert exc.status_code == 400
    assert exc.kind == "validation_error"
    assert exc.message == "Invalid input"
    assert exc.details == {"field": "rating"}

    assert UnauthenticatedError().status_code == 401
    assert ForbiddenError("no", capability="moderate").details == {"capability": "moderate"}
    assert ConflictError("stale", resource="Recipe").status_code == 409


def test_missing_token_returns_401_envelope(client):
    res = client.post("/recipes", json={"title": "x"})
    assert res.status_code == 401
    body = res.json()["error"]
    assert body["kind"] == "unauthenticated"
    assert body["status_code"] == 401
    assert body["message"]


def test_invalid_token_returns_401(client):
    res = client.get("/recipes/mine", headers={"Authorization": "Bearer nope"})
    assert res.status_code == 401
    assert res.json()["error"]["kind"] == "unauthenticated"


def test_forbidden_returns_403_envelope(client, users):
    res = client.get("/recipes/pending", headers=auth_headers(users["owner"]))
    assert res.status_code == 403
    assert res.json()["error"]["kind"] == "forbidden"


def test_malformed_body_returns_400(client, users):
    res = client.post("/recipes", json={"title": ["not", "a", "string"]}, headers=auth_headers(users["owner"]))
    assert res.status_code == 400
    body = res.json()["error"]
    assert body["kind"] == "validation_error"
    assert body["details"]["validation_errors"]


def test_domain_validation_error_returns_400(client, users):
    res = client.post(
        "/recipes",
        json={"title": "Soup", "ingredients": [], "instructions": "Boil", "category": "plats"},
        headers=auth_headers(users["owner"]),
    )
    assert res.status_code == 400
    assert res.json()["error"]["details"] == {"field": "ingredients"}


def test_unexpected_error_returns_generic_500(client, monkeypatch):
    def boom(*args, **kwargs):
        raise RuntimeError("secret internals")

    monkeypatch.setattr(recipe_moderation, "list_public", boom)
    res = client.get("/recipes")
    assert res.status_code == 500
    body = res.json()["error"]
    assert body["kind"] == "internal_error"
    assert "secret internals" not in res.text


def test_error_envelope_shape():
    res = create_error_response("Recipe with id '7' not found", 404, "not_found")
    assert res.status_code == 404
    assert json.loads(res.body) == {
        "error": {"kind": "not_found", "message": "Recipe with id '7' not found", "status_code": 404}
    }

    res = create_error_response("Bad", 400, "validation_error", details={"field": "title"})
    assert set(json.loads(res.body)["error"]) == {"kind", "message", "status_code", "details"}


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
