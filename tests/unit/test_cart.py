import pytest

from seating import make_seat
from services.cart import Cart, CartLineItem, CartProductLine


def _line(show_time_id, seats, price=12.99):
    return CartLineItem(
        show_time_id=show_time_id,
        show_id=1,
        show_title="The Phantom Menace",
        show_date="2024-01-05",
        start_time="14:00",
        seats=[make_seat(row, col) for row, col in seats],
        price_per_seat=price,
    )


def _product(product_id, quantity, price=4.99):
    return CartProductLine(product_id=product_id, name="Small Popcorn", price=price, quantity=quantity)


# adding the same showtime twice replaces the first selection
def test_showtime_selection_is_replaced_not_merged():
    cart = Cart()
    cart.add_showtime_selection(_line(7, [(0, 0), (0, 1)]))
    cart.add_showtime_selection(_line(7, [(3, 3)]))

    assert len(cart.items) == 1
    assert [seat["seatNumber"] for seat in cart.items[0].seats] == ["D4"]


def test_different_showtimes_are_kept_separately():
    cart = Cart()
    cart.add_showtime_selection(_line(1, [(0, 0)]))
    cart.add_showtime_selection(_line(2, [(0, 0)]))
    assert [item.show_time_id for item in cart.items] == [1, 2]

    cart.remove_showtime_selection(1)
    assert [item.show_time_id for item in cart.items] == [2]


def test_product_quantities_are_summed():
    cart = Cart()
    cart.add_product(_product(3, 2))
    cart.add_product(_product(3, 3))

    assert len(cart.products) == 1
    assert cart.products[0].quantity == 5


def test_set_product_quantity_replaces_or_removes():
    cart = Cart()
    cart.add_product(_product(3, 2))
    cart.set_product_quantity(3, 6)
    assert cart.products[0].quantity == 6

    cart.set_product_quantity(3, 0)
    assert cart.products == []


def test_totals_cover_tickets_and_concessions():
    cart = Cart()
    cart.add_showtime_selection(_line(1, [(0, 0), (0, 1)], price=12.99))
    cart.add_product(_product(3, 3, price=4.99))

    assert cart.total_price() == pytest.approx(40.95)
    assert cart.item_count() == 5


def test_clear_empties_both_collections():
    cart = Cart()
    cart.add_showtime_selection(_line(1, [(0, 0)]))
    cart.add_product(_product(3, 1))
    cart.remove_product(99)
    assert not cart.is_empty()

    cart.clear()
    assert cart.is_empty()
    assert cart.total_price() == 0
    assert cart.item_count() == 0


def test_cart_survives_session_serialization():
    cart = Cart()
    cart.add_showtime_selection(_line(1, [(1, 2)]))
    cart.add_product(_product(3, 2))

    restored = Cart.from_dict(cart.to_dict())
    assert restored == cart
    assert Cart.from_dict(None).is_empty()
