import uuid

import pytest
from django.db import DatabaseError
from django.db.models import QuerySet

from workspot.errors import ConflictError, NotFoundError, StorageError
from workspot.models import Favorite, Review, Spot
from workspot.services.contracts import FavoriteRecord, ReviewRecord, SpotFilters, SpotType
from workspot.services.favorite_service import FavoriteService
from workspot.services.locks import KeyedLock
from workspot.services.orm_stores import OrmFavoriteStore, OrmReviewStore, OrmSpotStore
from workspot.services.ratings import RatingSummary
from workspot.services.review_service import ReviewAggregationService
from workspot.services.spot_service import SpotService

from tests.factories import spot_fields

pytestmark = pytest.mark.django_db


@pytest.fixture
def stores():
    return OrmSpotStore(), OrmReviewStore(), OrmFavoriteStore()


@pytest.fixture
def services(stores):
    spots, reviews, favorites = stores
    locks = KeyedLock()
    return (
        SpotService(spots, reviews, favorites, locks),
        ReviewAggregationService(spots, reviews, locks),
        FavoriteService(spots, favorites),
    )


def test_spot_round_trip_through_orm(services, alice):
    spot_service, _, _ = services
    spot = spot_service.create(str(alice.pk), spot_fields(images=["https://img.example.com/1.jpg"]))

    row = Spot.objects.get(pk=spot.id)
    assert row.owner == alice
    assert row.spot_type == "CAFE"

    loaded = spot_service.get(spot.id)
    assert loaded.spot_type is SpotType.CAFE
    assert loaded.images == ["https://img.example.com/1.jpg"]
    assert loaded.owner_id == str(alice.pk)


def test_malformed_id_is_not_found(stores):
    spots, reviews, favorites = stores
    assert spots.get("not-a-uuid") is None
    assert reviews.get("not-a-uuid") is None
    assert favorites.get("not-a-uuid") is None


def test_find_filters_in_database(services, stores, alice):
    spot_service, _, _ = services
    spot_service.create(str(alice.pk), spot_fields(name="Cafe"))
    spot_service.create(str(alice.pk), spot_fields(name="Library", spot_type="LIBRARY", has_wifi=False))

    spots, _, _ = stores
    assert [s.name for s in spots.find(SpotFilters(has_wifi=True))] == ["Cafe"]
    assert [s.name for s in spots.find(SpotFilters(spot_type=SpotType.LIBRARY))] == ["Library"]
    assert len(spots.find(SpotFilters())) == 2


def test_review_aggregate_is_persisted(services, alice, bob, django_user_model):
    spot_service, review_service, _ = services
    carol = django_user_model.objects.create_user(username="carol", password="pw")
    spot = spot_service.create(str(alice.pk), spot_fields())

    first = review_service.create_review(spot.id, str(alice.pk), 5)
    review_service.create_review(spot.id, str(bob.pk), 4)
    review_service.create_review(spot.id, str(carol.pk), 3)
    row = Spot.objects.get(pk=spot.id)
    assert (row.average_rating, row.review_count) == (4.0, 3)

    review_service.update_review(first.id, str(alice.pk), {"rating": 2})
    row.refresh_from_db()
    assert (row.average_rating, row.review_count) == (3.0, 3)

    review_service.delete_review(first.id, str(alice.pk))
    row.refresh_from_db()
    assert (row.average_rating, row.review_count) == (3.5, 2)


def test_unique_review_constraint_maps_to_conflict(services, stores, alice):
    spot_service, _, _ = services
    _, reviews, _ = stores
    spot = spot_service.create(str(alice.pk), spot_fields())
    reviews.create(ReviewRecord(id="6f1c2a9e-3b0d-4c43-9a43-6a1d1f0c0001", spot_id=spot.id, user_id=str(alice.pk), rating=4))

    with pytest.raises(ConflictError):
        reviews.create(
            ReviewRecord(id="6f1c2a9e-3b0d-4c43-9a43-6a1d1f0c0002", spot_id=spot.id, user_id=str(alice.pk), rating=2)
        )
    assert Review.objects.filter(spot_id=spot.id).count() == 1


def test_delete_spot_cascades(services, alice, bob):
    spot_service, review_service, favorite_service = services
    spot = spot_service.create(str(alice.pk), spot_fields())
    review_service.create_review(spot.id, str(bob.pk), 4)
    favorite_service.create(str(bob.pk), spot.id)

    spot_service.delete(spot.id, str(alice.pk))

    assert not Spot.objects.filter(pk=spot.id).exists()
    assert not Review.objects.exists()
    assert not Favorite.objects.exists()


def test_set_rating_on_missing_spot(stores):
    spots, _, _ = stores
    with pytest.raises(NotFoundError):
        spots.set_rating("6f1c2a9e-3b0d-4c43-9a43-6a1d1f0c0003", RatingSummary(4.0, 1))


def test_transaction_context_allows_reads_and_writes(services, stores, alice):
    spot_service, _, _ = services
    spots, _, _ = stores
    spot = spot_service.create(str(alice.pk), spot_fields())
    with spots.transaction(spot.id):
        spots.update(spot.id, {"name": "Inside"})
    assert spots.get(spot.id).name == "Inside"


@pytest.mark.django_db(transaction=True)
def test_favorite_for_vanished_spot_is_not_found(alice):
    """The foreign-key failure at commit is reported as a missing spot, not a duplicate."""
    with pytest.raises(NotFoundError, match="not found"):
        OrmFavoriteStore().create(FavoriteRecord(id=str(uuid.uuid4()), user_id=str(alice.pk), spot_id=str(uuid.uuid4())))
    assert not Favorite.objects.exists()


@pytest.mark.django_db(transaction=True)
def test_review_for_vanished_spot_is_not_found(alice):
    record = ReviewRecord(id=str(uuid.uuid4()), spot_id=str(uuid.uuid4()), user_id=str(alice.pk), rating=4)
    with pytest.raises(NotFoundError):
        OrmReviewStore().create(record)
    assert not Review.objects.exists()


def test_duplicate_favorite_in_store_is_conflict(services, stores, alice):
    spot_service, _, _ = services
    _, _, favorites = stores
    spot = spot_service.create(str(alice.pk), spot_fields())
    favorites.create(FavoriteRecord(id=str(uuid.uuid4()), user_id=str(alice.pk), spot_id=spot.id))

    with pytest.raises(ConflictError, match="already in your favorites"):
        favorites.create(FavoriteRecord(id=str(uuid.uuid4()), user_id=str(alice.pk), spot_id=spot.id))
    assert Favorite.objects.count() == 1


def test_database_failure_becomes_storage_error(stores, monkeypatch):
    def broken(self, *fields):
        raise DatabaseError("connection lost")

    monkeypatch.setattr(QuerySet, "order_by", broken)
    spots, _, _ = stores
    with pytest.raises(StorageError, match="spot find"):
        spots.find(SpotFilters())
