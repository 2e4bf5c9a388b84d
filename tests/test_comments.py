"""Tests for comment upsert, deletion, reporting and the rating aggregate."""
import pytest

from core.exceptions import ForbiddenError, NotFoundError, ValidationError
from services.comments import comment_service, compute_rating_aggregate, validate_rating
from services.moderation import recipe_moderation


@pytest.fixture
def recipe(db, principals):
    return recipe_moderation.submit(
        db, principals["owner"], title="Crème brûlée", ingredients=["cream", "eggs"],
        instructions="Bake gently.", category="dessert",
    )


def assert_aggregate_matches(recipe):
    ratings = [c["rating"] for c in recipe.comments]
    assert recipe.ratings_count == len(recipe.comments)
    expected = round(sum(ratings) / len(ratings), 2) if ratings else 0
    assert recipe.ratings_avg == expected


def test_compute_rating_aggregate():
    assert compute_rating_aggregate([]) == (0.0, 0)
    assert compute_rating_aggregate([{"rating": 5}, {"rating": 4}, {"rating": 4}]) == (4.33, 3)


@pytest.mark.parametrize("value", [-1, 6, "3", True, 2.5])
def test_validate_rating_rejects_out_of_range(value):
    with pytest.raises(ValidationError):
        validate_rating(value)


def test_validate_rating_defaults_to_zero():
    assert validate_rating(None) == 0
    assert validate_rating(4.0) == 4


def test_add_comment_appends_and_recomputes(db, recipe, principals, users):
    updated, created = comment_service.add_or_update(db, recipe.id, principals["other"], " great ", 5)
    assert created is True
    assert len(updated.comments) == 1
    comment = updated.comments[0]
    assert comment["text"] == "great"
    assert comment["author"] == users["other"].id
    assert comment["author_email"] == "other@example.com"
    assert comment["reports"] == []
    assert updated.ratings_avg == 5.0 and updated.ratings_count == 1


def test_second_comment_by_same_author_overwrites_in_place(db, recipe, principals):
    comment_service.add_or_update(db, recipe.id, principals["other"], "great", 5)
    comment_service.add_or_update(db, recipe.id, principals["nutritionist"], "fine", 2)
    first_id = recipe_moderation.get(db, recipe.id).comments[0]["id"]

    updated, created = comment_service.add_or_update(db, recipe.id, principals["other"], "good", 3)
    assert created is False
    assert len(updated.comments) == 2
    assert updated.comments[0]["id"] == first_id
    assert updated.comments[0]["text"] == "good"
    assert updated.ratings_avg == 2.5
    assert_aggregate_matches(updated)


def test_comment_count_equals_distinct_authors(db, recipe, principals):
    for name, rating in [("other", 1), ("owner", 2), ("other", 4), ("admin", 5), ("owner", 0)]:
        updated, _ = comment_service.add_or_update(db, recipe.id, principals[name], "note", rating)
        assert_aggregate_matches(updated)
    assert updated.ratings_count == 3
    assert updated.ratings_avg == 3.0


@pytest.mark.parametrize("text", [None, "", "   "])
def test_blank_comment_text_is_rejected(db, recipe, principals, text):
    with pytest.raises(ValidationError):
        comment_service.add_or_update(db, recipe.id, principals["other"], text, 3)
    assert recipe_moderation.get(db, recipe.id).comments == []


def test_comment_on_missing_recipe(db, principals):
    with pytest.raises(NotFoundError):
        comment_service.add_or_update(db, 404, principals["other"], "hello", 3)


def test_author_can_delete_comment(db, recipe, principals):
    comment_service.add_or_update(db, recipe.id, principals["other"], "great", 5)
    comment_service.add_or_update(db, recipe.id, principals["owner"], "meh", 1)
    comment_id = recipe_moderation.get(db, recipe.id).comments[0]["id"]

    updated = comment_service.delete(db, recipe.id, comment_id, principals["other"])
    assert [c["text"] for c in updated.comments] == ["meh"]
    assert updated.ratings_avg == 1.0 and updated.ratings_count == 1


def test_admin_can_delete_any_comment_and_aggregate_resets(db, recipe, principals):
    comment_service.add_or_update(db, recipe.id, principals["other"], "great", 5)
    comment_id = recipe_moderation.get(db, recipe.id).comments[0]["id"]
    updated = comment_service.delete(db, recipe.id, comment_id, principals["admin"])
    assert updated.comments == []
    assert updated.ratings_avg == 0 and updated.ratings_count == 0


@pytest.mark.parametrize("requester", ["owner", "nutritionist"])
def test_non_author_non_admin_cannot_delete_comment(db, recipe, principals, requester):
    comment_service.add_or_update(db, recipe.id, principals["other"], "great", 5)
    comment_id = recipe_moderation.get(db, recipe.id).comments[0]["id"]
    with pytest.raises(ForbiddenError):
        comment_service.delete(db, recipe.id, comment_id, principals[requester])
    assert len(recipe_moderation.get(db, recipe.id).comments) == 1


def test_delete_missing_comment(db, recipe, principals):
    with pytest.raises(NotFoundError) as exc_info:
        comment_service.delete(db, recipe.id, "nope", principals["admin"])
    assert "Comment" in exc_info.value.message


def test_reports_accumulate_without_touching_ratings(db, recipe, principals, users):
    comment_service.add_or_update(db, recipe.id, principals["other"], "spam spam", 5)
    comment_id = recipe_moderation.get(db, recipe.id).comments[0]["id"]

    comment_service.report(db, recipe.id, comment_id, principals["owner"], " spam ")
    reports = comment_service.report(db, recipe.id, comment_id, principals["owner"])
    assert [r["reporter"] for r in reports] == [users["owner"].id, users["owner"].id]
    assert [r["reason"] for r in reports] == ["spam", None]

    reloaded = recipe_moderation.get(db, recipe.id)
    assert reloaded.status == "pending"
    assert reloaded.ratings_avg == 5.0 and reloaded.ratings_count == 1


def test_report_missing_comment(db, recipe, principals):
    with pytest.raises(NotFoundError):
        comment_service.report(db, recipe.id, "nope", principals["owner"])
