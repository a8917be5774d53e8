"""Tests for reviews and product rating aggregation."""

import pytest

from packwell.database import product_db, review_db
from packwell.services.ratings import compute_rating, refresh_product_rating

REVIEW = {
    "rating": 4,
    "title": "Sturdy bottles",
    "comment": "No leaks after a month of daily use.",
}


@pytest.fixture
def delivered_order(placed_order, advance):
    return advance(placed_order["id"], "confirmed", "processing", "shipped", "delivered")


@pytest.fixture
def post_review(client, customer_headers, product_a):
    def _post(order_id, headers=None, **overrides):
        return client.post(
            "/api/reviews",
            json={"productId": product_a.id, "orderId": order_id, **REVIEW, **overrides},
            headers=headers or customer_headers,
        )

    return _post


def ratings_of(product):
    stored = product_db.get_product(product.id).ratings
    return {"average": stored.average, "count": stored.count}


class TestComputeRating:
    def test_no_reviews(self):
        rating = compute_rating([])
        assert (rating.average, rating.count) == (0, 0)

    def test_rounds_to_one_decimal(self):
        rating = compute_rating([5, 4, 4])
        assert rating.average == 4.3
        assert rating.count == 3

    @pytest.mark.parametrize(
        "ratings, expected",
        [([2, 2, 2, 3], 2.3), ([1, 1, 1, 2], 1.3), ([4, 4, 4, 5], 4.3), ([3, 4], 3.5)],
        ids=["2.25", "1.25", "4.25", "3.5"],
    )
    def test_halves_round_up(self, ratings, expected):
        assert compute_rating(ratings).average == expected


class TestCreateReview:
    def test_create_updates_rating(self, post_review, product_a, delivered_order):
        response = post_review(delivered_order["id"])
        assert response.status_code == 201
        review = response.json()["data"]["review"]
        assert review["isVerified"] is True
        assert review["isApproved"] is True
        assert review["userName"] == "Asha Patel"
        assert review["orderNumber"] == delivered_order["orderNumber"]
        assert ratings_of(product_a) == {"average": 4.0, "count": 1}

    def test_order_must_be_delivered(self, post_review, placed_order):
        response = post_review(placed_order["id"])
        assert response.status_code == 404
        assert response.json()["message"] == "Order not found or not delivered yet"

    def test_order_must_belong_to_caller(self, post_review, other_headers, delivered_order):
        response = post_review(delivered_order["id"], headers=other_headers)
        assert response.status_code == 404

    def test_product_must_be_in_order(self, post_review, product_b, delivered_order):
        response = post_review(delivered_order["id"], productId=product_b.id)
        assert response.status_code == 400
        assert response.json()["message"] == "Product was not in this order"

    def test_unknown_product(self, post_review, delivered_order):
        response = post_review(delivered_order["id"], productId="missing")
        assert response.status_code == 404
        assert response.json()["message"] == "Product not found"

    def test_one_review_per_order(self, post_review, delivered_order):
        assert post_review(delivered_order["id"]).status_code == 201

        response = post_review(delivered_order["id"])
        assert response.status_code == 400
        assert response.json()["message"] == "Review already exists for this product and order"

    @pytest.mark.parametrize(
        "overrides",
        [{"rating": 6}, {"rating": 0}, {"title": "Ok"}, {"comment": "short"}],
        ids=["rating-high", "rating-low", "title-short", "comment-short"],
    )
    def test_validation(self, post_review, delivered_order, overrides):
        response = post_review(delivered_order["id"], **overrides)
        assert response.status_code == 400
        assert response.json()["errors"]


class TestRatingAggregation:
    @pytest.fixture
    def review_id(self, post_review, delivered_order):
        return post_review(delivered_order["id"]).json()["data"]["review"]["id"]

    def test_deleting_only_review_resets_rating(self, client, customer_headers, product_a, review_id):
        response = client.delete(f"/api/reviews/{review_id}", headers=customer_headers)
        assert response.status_code == 200
        assert ratings_of(product_a) == {"average": 0, "count": 0}

    def test_update_recomputes(self, client, customer_headers, product_a, review_id):
        response = client.put(
            f"/api/reviews/{review_id}",
            json={**REVIEW, "rating": 2},
            headers=customer_headers,
        )
        assert response.status_code == 200
        assert ratings_of(product_a) == {"average": 2.0, "count": 1}

    def test_reject_and_approve_recompute(self, client, admin_headers, product_a, review_id):
        url = f"/api/reviews/{review_id}/approve"

        response = client.put(url, json={"isApproved": False}, headers=admin_headers)
        assert response.status_code == 200
        assert response.json()["message"] == "Review rejected successfully"
        assert ratings_of(product_a) == {"average": 0, "count": 0}

        client.put(url, json={"isApproved": True}, headers=admin_headers)
        assert ratings_of(product_a) == {"average": 4.0, "count": 1}

    def test_only_owner_can_edit(self, client, other_headers, review_id):
        response = client.put(f"/api/reviews/{review_id}", json=REVIEW, headers=other_headers)
        assert response.status_code == 404
        response = client.delete(f"/api/reviews/{review_id}", headers=other_headers)
        assert response.status_code == 404

    def test_refresh_failure_is_swallowed(self, product_a, monkeypatch):
        def broken(product_id):
            raise RuntimeError("aggregation failed")

        monkeypatch.setattr(review_db, "approved_ratings", broken)
        assert refresh_product_rating(product_a.id) is None

    def test_review_mutation_survives_refresh_failure(self, client, customer_headers, review_id, monkeypatch):
        def broken(product_id):
            raise RuntimeError("aggregation failed")

        monkeypatch.setattr(review_db, "approved_ratings", broken)
        response = client.delete(f"/api/reviews/{review_id}", headers=customer_headers)
        assert response.status_code == 200


class TestReviewListings:
    @pytest.fixture
    def reviewed(self, post_review, delivered_order):
        return post_review(delivered_order["id"]).json()["data"]["review"]

    def test_product_reviews_with_distribution(self, client, product_a, reviewed):
        response = client.get(f"/api/reviews/product/{product_a.id}")
        assert response.status_code == 200
        data = response.json()["data"]
        assert [r["id"] for r in data["reviews"]] == [reviewed["id"]]
        assert data["ratingDistribution"] == [{"rating": 4, "count": 1}]

    def test_product_reviews_hide_rejected(self, client, admin_headers, product_a, reviewed):
        client.put(f"/api/reviews/{reviewed['id']}/approve", json={"isApproved": False}, headers=admin_headers)

        data = client.get(f"/api/reviews/product/{product_a.id}").json()["data"]
        assert data["reviews"] == []
        assert data["ratingDistribution"] == []

    def test_product_reviews_rating_filter(self, client, product_a, reviewed):
        data = client.get(f"/api/reviews/product/{product_a.id}?rating=5").json()["data"]
        assert data["reviews"] == []
        assert data["ratingDistribution"] == [{"rating": 4, "count": 1}]

    def test_my_reviews(self, client, customer_headers, other_headers, reviewed):
        assert len(client.get("/api/reviews/user", headers=customer_headers).json()["data"]["reviews"]) == 1
        assert client.get("/api/reviews/user", headers=other_headers).json()["data"]["reviews"] == []

    def test_helpful_feedback(self, client, other_headers, reviewed):
        url = f"/api/reviews/{reviewed['id']}/helpful"
        client.post(url, json={"isHelpful": True}, headers=other_headers)
        response = client.post(url, json={"isHelpful": False}, headers=other_headers)
        assert response.json()["data"] == {"helpful": 1, "notHelpful": 1}

    def test_admin_status_filter(self, client, admin_headers, reviewed):
        pending = client.get("/api/reviews/admin/all?status=pending", headers=admin_headers)
        assert pending.json()["data"]["reviews"] == []

        approved = client.get("/api/reviews/admin/all?status=approved", headers=admin_headers)
        assert len(approved.json()["data"]["reviews"]) == 1

    def test_admin_listing_requires_admin(self, client, customer_headers):
        assert client.get("/api/reviews/admin/all", headers=customer_headers).status_code == 403
