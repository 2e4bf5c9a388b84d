"""Lost-update detection: two sessions working from the same stale read."""
import pytest
from sqlalchemy.orm import sessionmaker

from core.exceptions import ConflictError
from database.database import make_engine
from database.models import Base
from services.comments import comment_service
from services.moderation import recipe_moderation

from conftest import _add_user, principal_for


@pytest.fixture
def two_sessions(tmp_path):
    engine = make_engine(f"sqlite:///{tmp_path / 'concurrency.db'}")
    Base.metadata.create_all(bind=engine)
    factory = sessionmaker(bind=engine)
    first, second = factory(), factory()
    yield first, second
    first.close()
    second.close()
    engine.dispose()


@pytest.fixture
def setup(two_sessions):
    first, second = two_sessions
    owner = principal_for(_add_user(first, "owner@example.com"))
    other = principal_for(_add_user(first, "other@example.com"))
    recipe = recipe_moderation.submit(
        first, owner, title="Tarte", ingredients=["flour"], instructions="Bake", category="dessert",
    )
    return first, second, owner, other, recipe.id


def test_stale_edit_is_rejected(setup):
    first, second, owner, _, recipe_id = setup
    recipe_moderation.get(second, recipe_id)

    recipe_moderation.edit(first, recipe_id, owner, {"title": "Tarte tatin"})
    with pytest.raises(ConflictError):
        recipe_moderation.edit(second, recipe_id, owner, {"title": "Tarte fine"})

    assert recipe_moderation.get(second, recipe_id).title == "Tarte tatin"


def test_concurrent_comment_does_not_lose_the_first_write(setup):
    first, second, owner, other, recipe_id = setup
    recipe_moderation.get(second, recipe_id)

    comment_service.add_or_update(first, recipe_id, other, "lovely", 5)
    with pytest.raises(ConflictError):
        comment_service.add_or_update(second, recipe_id, owner, "dry", 1)

    reloaded = recipe_moderation.get(second, recipe_id)
    assert [c["text"] for c in reloaded.comments] == ["lovely"]
    assert reloaded.ratings_avg == 5.0 and reloaded.ratings_count == 1

    # A retry against fresh state goes through.
    updated, created = comment_service.add_or_update(second, recipe_id, owner, "dry", 1)
    assert created is True
    assert updated.ratings_count == 2 and updated.ratings_avg == 3.0


def test_expected_version_mismatch(setup):
    first, _, owner, _, recipe_id = setup
    version = recipe_moderation.get(first, recipe_id).version
    recipe_moderation.edit(first, recipe_id, owner, {"instructions": "Bake longer"}, expected_version=version)
    with pytest.raises(ConflictError):
        recipe_moderation.edit(first, recipe_id, owner, {"instructions": "Bake less"}, expected_version=version)
