"""Tests for ProfileService and seller badges."""

from unittest.mock import patch

import pytest

from ecofinds.errors import DuplicateEmail, InvalidProfile, Unauthenticated
from ecofinds.models import User
from ecofinds.services.checkout_service import CheckoutService
from ecofinds.services.profile_service import ProfileService, seller_badge
from ecofinds.services.purchase_service import PurchaseService
from ecofinds.services.review_service import ReviewService
from ecofinds.services.shopping_cart_service import ShoppingCartService


class TestSellerBadge:
    @pytest.mark.parametrize(
        "avg_rating, total_sales, expected",
        [
            (4.8, 5, "Eco Champion"),
            (4.5, 10, "Eco Champion"),
            (4.9, 4, "Green Seller"),
            (4.0, 3, "Green Seller"),
            (4.4, 5, "Green Seller"),
            (3.9, 10, "Eco Starter"),
            (0.0, 1, "Eco Starter"),
            (5.0, 0, None),
            (0.0, 0, None),
        ],
    )
    def test_badge_tiers(self, avg_rating, total_sales, expected):
        assert seller_badge(avg_rating, total_sales) == expected


class TestProfileService:
    @pytest.fixture
    def services(self, database, fixed_rng):
        purchases = PurchaseService(database, rng=fixed_rng)
        reviews = ReviewService(database)
        return {
            "cart": ShoppingCartService(database, rng=fixed_rng),
            "checkout": CheckoutService(database, rng=fixed_rng),
            "purchases": purchases,
            "reviews": reviews,
            "profile": ProfileService(purchases, reviews, database),
        }

    def test_new_user_stats(self, services, users):
        stats = services["profile"].get_stats("U001")

        assert stats.total_sales == 0
        assert stats.total_purchases == 0
        assert stats.avg_rating == 0
        assert stats.total_reviews == 0
        assert stats.co2_saved == 0
        assert stats.badge is None

    def test_stats_after_sales_and_reviews(self, services, make_product):
        products = [make_product(owner="U001", title=t, price="50.00") for t in ("Bike", "Lamp", "Desk")]
        for product_id in products:
            services["cart"].add_item("U002", product_id)
        services["checkout"].checkout("U002")
        for product_id in products:
            services["reviews"].submit_review("U002", "U001", product_id, 4)

        seller = services["profile"].get_stats("U001")
        buyer = services["profile"].get_stats("U002")

        assert seller.total_sales == 3
        assert seller.total_purchases == 0
        assert seller.avg_rating == 4.0
        assert seller.total_reviews == 3
        assert seller.badge == "Green Seller"

        assert buyer.total_sales == 0
        assert buyer.total_purchases == 3
        assert buyer.co2_saved == 15
        assert buyer.badge is None

    def test_stats_require_user(self, services):
        with pytest.raises(Unauthenticated):
            services["profile"].get_stats(None)


class TestProfileDetails:
    @pytest.fixture
    def profile(self, database):
        return ProfileService(database=database)

    def test_get_profile(self, profile, users):
        view = profile.get_profile("U001")

        assert (view.id, view.username, view.email) == ("U001", "alice", "alice@example.com")

    def test_get_profile_provisions_first_time_user(self, profile, count_rows):
        view = profile.get_profile("U999")

        assert view.username == "U999"
        assert view.email is None
        assert count_rows(User, id="U999") == 1

    def test_update_profile(self, profile, users):
        view = profile.update_profile("U001", username="  Alice B ", email="Alice.B@Example.com")

        assert view.username == "Alice B"
        assert view.email == "alice.b@example.com"
        assert profile.get_profile("U001").email == "alice.b@example.com"

    def test_update_single_field(self, profile, users):
        view = profile.update_profile("U002", username="robert")

        assert view.username == "robert"
        assert view.email == "bob@example.com"

    def test_first_time_user_sets_email(self, profile, count_rows):
        view = profile.update_profile("U999", email="new@example.com")

        assert view.email == "new@example.com"
        assert count_rows(User, email="new@example.com") == 1

    def test_keeping_own_email_is_not_a_duplicate(self, profile, users):
        view = profile.update_profile("U001", email="alice@example.com")

        assert view.email == "alice@example.com"

    def test_duplicate_email(self, profile, users):
        with pytest.raises(DuplicateEmail):
            profile.update_profile("U002", email="ALICE@example.com")

        assert profile.get_profile("U002").email == "bob@example.com"

    def test_duplicate_email_caught_by_constraint(self, profile, users):
        """Test an email claimed between the pre-check and the write still maps to DuplicateEmail."""
        with patch.object(profile, "_email_owner", return_value=None):
            with pytest.raises(DuplicateEmail):
                profile.update_profile("U002", email="alice@example.com")

        assert profile.get_profile("U002").email == "bob@example.com"

    @pytest.mark.parametrize(
        "changes",
        [
            {},
            {"username": "   "},
            {"username": "x" * 81},
            {"email": "not-an-email"},
            {"email": "a@b"},
            {"email": "two@@example.com"},
        ],
    )
    def test_invalid_profile(self, profile, users, changes):
        with pytest.raises(InvalidProfile):
            profile.update_profile("U001", **changes)

        assert profile.get_profile("U001").username == "alice"

    def test_update_requires_user(self, profile):
        with pytest.raises(Unauthenticated):
            profile.update_profile(None, username="ghost")


class TestPurchaseService:
    def test_history_newest_first(self, database, fixed_rng, make_product):
        cart = ShoppingCartService(database, rng=fixed_rng)
        checkout = CheckoutService(database, rng=fixed_rng)
        purchases = PurchaseService(database, rng=fixed_rng)

        cart.add_item("U002", make_product(title="Bike"))
        checkout.checkout("U002")
        cart.add_item("U002", make_product(title="Lamp"))
        checkout.checkout("U002")

        history = purchases.list_purchases("U002")

        assert [p.product.title for p in history] == ["Lamp", "Bike"]
        assert all(p.product.user_id == "U001" for p in history)
        assert purchases.total_purchases("U002") == 2
        assert purchases.total_sales("U001") == 2
        assert purchases.list_purchases("U003") == []
