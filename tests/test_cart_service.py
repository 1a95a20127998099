"""
Tests for CartService with a real (SQLite) database.

Covers the single-merchant rule, conflict details, atomic replace, quantity
bounds and the idempotent clear.
"""

import uuid

import pytest
from sqlalchemy.orm import Session

from test_fixtures import db_session, session_factory, make_user, make_catalog, food_named
from app.exceptions import ConflictError, NotFoundError, ServiceValidationError
from domain.models import Cart, CartItem
from domain.schemas.cart_schemas import AddCartItemRequest
from repositories import CartRepository
from services.cart_service import CartService


def _add(db, user, merchant, food_name, quantity=1, replace_cart=False):
    return CartService.add_item(
        db,
        user.user_id,
        AddCartItemRequest(
            merchant_id=merchant.merchant_id,
            food_id=food_named(merchant, food_name).food_id,
            quantity=quantity,
            replace_cart=replace_cart,
        ),
    )


def test_add_item_creates_cart_for_merchant(db_session: Session):
    """
    Verifies:
    - First add creates the cart and binds it to the merchant
    - Line snapshot carries food name and unit price
    - Cart total is the sum of line totals
    """
    user = make_user(db_session)
    bistro, _ = make_catalog(db_session)

    result = _add(db_session, user, bistro, "Bibimbap", quantity=2)

    assert result.quantity == 2
    assert result.line_total == 19000
    assert result.cart_total_amount == 19000
    assert result.replaced_cart is False

    cart = CartService.get_cart(db_session, user.user_id)
    assert cart.merchant_id == bistro.merchant_id
    assert cart.merchant_name == "Corner Bistro"
    assert [i.food_name for i in cart.items] == ["Bibimbap"]
    assert cart.items[0].unit_price == 9500


def test_add_same_food_increments_existing_line(db_session: Session):
    user = make_user(db_session)
    bistro, _ = make_catalog(db_session)

    first = _add(db_session, user, bistro, "Rice")
    second = _add(db_session, user, bistro, "Rice", quantity=2)

    assert second.cart_item_id == first.cart_item_id
    assert second.quantity == 3
    cart = CartService.get_cart(db_session, user.user_id)
    assert len(cart.items) == 1
    assert cart.total_amount == 3000


def test_add_from_other_merchant_conflicts_and_leaves_cart_unchanged(db_session: Session):
    """
    Verifies:
    - Mismatched merchant without replace raises ConflictError
    - Error details name both merchants
    - Cart keeps its lines and merchant
    """
    user = make_user(db_session)
    bistro, noodle = make_catalog(db_session)
    _add(db_session, user, bistro, "Bibimbap")
    _add(db_session, user, bistro, "Kimchi Stew")

    with pytest.raises(ConflictError) as exc_info:
        _add(db_session, user, noodle, "Ramen")

    details = exc_info.value.details
    assert details["current_merchant_name"] == "Corner Bistro"
    assert details["requested_merchant_name"] == "Noodle House"
    assert details["requested_merchant_id"] == str(noodle.merchant_id)

    cart = CartService.get_cart(db_session, user.user_id)
    assert cart.merchant_id == bistro.merchant_id
    assert sorted(i.food_name for i in cart.items) == ["Bibimbap", "Kimchi Stew"]
    assert cart.total_amount == 18500


def test_replace_cart_swaps_merchant(db_session: Session):
    user = make_user(db_session)
    bistro, noodle = make_catalog(db_session)
    _add(db_session, user, bistro, "Bibimbap")
    _add(db_session, user, bistro, "Rice")

    result = _add(db_session, user, noodle, "Ramen", replace_cart=True)

    assert result.replaced_cart is True
    assert result.cart_total_amount == 8500
    cart = CartService.get_cart(db_session, user.user_id)
    assert cart.merchant_id == noodle.merchant_id
    assert [i.food_name for i in cart.items] == ["Ramen"]
    assert db_session.query(CartItem).count() == 1


def test_replace_cart_is_atomic(db_session: Session, monkeypatch):
    """
    Verifies:
    - A failure after the old lines were cleared rolls the whole replace back
    - The original merchant and lines survive
    """
    user = make_user(db_session)
    bistro, noodle = make_catalog(db_session)
    _add(db_session, user, bistro, "Bibimbap")
    ramen_id = food_named(noodle, "Ramen").food_id
    noodle_id = noodle.merchant_id

    def boom(self, cart_id):
        raise RuntimeError("disk full")

    monkeypatch.setattr(CartRepository, "next_position", boom)

    with pytest.raises(RuntimeError):
        CartService.add_item(
            db_session,
            user.user_id,
            AddCartItemRequest(merchant_id=noodle_id, food_id=ramen_id, replace_cart=True),
        )

    monkeypatch.undo()
    cart = CartService.get_cart(db_session, user.user_id)
    assert cart.merchant_name == "Corner Bistro"
    assert [i.food_name for i in cart.items] == ["Bibimbap"]


def test_add_food_of_another_merchant_is_validation_error(db_session: Session):
    user = make_user(db_session)
    bistro, noodle = make_catalog(db_session)

    with pytest.raises(ServiceValidationError):
        CartService.add_item(
            db_session,
            user.user_id,
            AddCartItemRequest(
                merchant_id=bistro.merchant_id,
                food_id=food_named(noodle, "Ramen").food_id,
            ),
        )


def test_add_unknown_food_or_merchant_is_not_found(db_session: Session):
    user = make_user(db_session)
    bistro, _ = make_catalog(db_session)

    with pytest.raises(NotFoundError):
        CartService.add_item(
            db_session,
            user.user_id,
            AddCartItemRequest(merchant_id=bistro.merchant_id, food_id=uuid.uuid4()),
        )
    with pytest.raises(NotFoundError):
        CartService.add_item(
            db_session,
            user.user_id,
            AddCartItemRequest(
                merchant_id=uuid.uuid4(), food_id=food_named(bistro, "Rice").food_id
            ),
        )


def test_add_beyond_max_quantity_rejected(db_session: Session):
    user = make_user(db_session)
    bistro, _ = make_catalog(db_session)
    _add(db_session, user, bistro, "Rice", quantity=98)

    with pytest.raises(ServiceValidationError):
        _add(db_session, user, bistro, "Rice", quantity=2)

    cart = CartService.get_cart(db_session, user.user_id)
    assert cart.items[0].quantity == 98


def test_update_quantity_sets_line(db_session: Session):
    user = make_user(db_session)
    bistro, _ = make_catalog(db_session)
    added = _add(db_session, user, bistro, "Kimchi Stew")

    result = CartService.update_quantity(db_session, user.user_id, added.cart_item_id, 3)

    assert result.quantity == 3
    assert result.line_total == 27000
    assert result.cart_total_amount == 27000
    assert result.removed is False


def test_update_quantity_below_one_removes_line(db_session: Session):
    """
    Verifies:
    - Quantity 0 removes the line
    - Removing the last line clears the cart's merchant
    """
    user = make_user(db_session)
    bistro, _ = make_catalog(db_session)
    added = _add(db_session, user, bistro, "Kimchi Stew")

    result = CartService.update_quantity(db_session, user.user_id, added.cart_item_id, 0)

    assert result.removed is True
    assert result.cart_total_amount == 0
    cart = CartService.get_cart(db_session, user.user_id)
    assert cart.is_empty
    assert cart.merchant_id is None
    stored = db_session.query(Cart).filter(Cart.user_id == user.user_id).one()
    assert stored.merchant_id is None


def test_update_quantity_above_max_rejected(db_session: Session):
    user = make_user(db_session)
    bistro, _ = make_catalog(db_session)
    added = _add(db_session, user, bistro, "Rice", quantity=5)

    with pytest.raises(ServiceValidationError):
        CartService.update_quantity(db_session, user.user_id, added.cart_item_id, 100)

    assert CartService.get_cart(db_session, user.user_id).items[0].quantity == 5


def test_cart_item_of_another_user_not_found(db_session: Session):
    owner = make_user(db_session)
    other = make_user(db_session, profile_type="student")
    bistro, _ = make_catalog(db_session)
    added = _add(db_session, owner, bistro, "Rice")

    with pytest.raises(NotFoundError):
        CartService.update_quantity(db_session, other.user_id, added.cart_item_id, 2)
    with pytest.raises(NotFoundError):
        CartService.remove_item(db_session, other.user_id, added.cart_item_id)


def test_clear_cart_is_idempotent(db_session: Session):
    user = make_user(db_session)
    bistro, _ = make_catalog(db_session)
    _add(db_session, user, bistro, "Rice")
    _add(db_session, user, bistro, "Bibimbap")

    assert CartService.clear_cart(db_session, user.user_id) == 2
    assert CartService.clear_cart(db_session, user.user_id) == 0
    assert CartService.get_cart(db_session, user.user_id).is_empty


def test_clear_cart_without_cart_is_noop(db_session: Session):
    user = make_user(db_session)
    assert CartService.clear_cart(db_session, user.user_id) == 0
    cart = CartService.get_cart(db_session, user.user_id)
    assert cart.is_empty
    assert cart.cart_id is None
