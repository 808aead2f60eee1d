from storefront.domain.catalog import Product
from storefront.domain.errors import BusinessError, ErrorKind
from storefront.domain.pricing import ShippingMethod

from conftest import USER, OTHER_USER, SHIRT, SOCKS, JACKET, SWEATER


def test_add_to_cart_merges_repeated_adds(cart_service):
    for quantity in (1, 2, 4):
        cart_service.add_to_cart(USER, SHIRT, quantity)

    lines = cart_service.repo.get_lines(USER)
    assert len(lines) == 1
    assert lines[0].quantity == 7


def test_add_to_cart_defaults_to_one(cart_service):
    line = cart_service.add_to_cart(USER, SHIRT)
    assert line.quantity == 1


def test_add_to_cart_rejects_bad_quantity(cart_service):
    for quantity in (0, -3):
        result = cart_service.add_to_cart(USER, SHIRT, quantity)
        assert isinstance(result, BusinessError)
        assert result.kind == ErrorKind.INVALID_QUANTITY
    assert cart_service.repo.get_lines(USER) == []


def test_add_to_cart_rejects_unknown_and_out_of_stock(cart_service):
    assert cart_service.add_to_cart(USER, 404).kind == ErrorKind.PRODUCT_UNAVAILABLE
    assert cart_service.add_to_cart(USER, JACKET).kind == ErrorKind.PRODUCT_UNAVAILABLE
    assert cart_service.repo.get_lines(USER) == []


def test_update_quantity(cart_service):
    line = cart_service.add_to_cart(USER, SHIRT, 2)

    updated = cart_service.update_quantity(USER, line.id, 5)

    assert updated.quantity == 5


def test_update_quantity_floor_never_mutates(cart_service):
    line = cart_service.add_to_cart(USER, SHIRT, 2)

    for quantity in (0, -1):
        result = cart_service.update_quantity(USER, line.id, quantity)
        assert result.kind == ErrorKind.INVALID_QUANTITY

    assert cart_service.repo.get_line(USER, SHIRT).quantity == 2


def test_update_quantity_checks_ownership(cart_service):
    line = cart_service.add_to_cart(USER, SHIRT, 2)

    assert cart_service.update_quantity(OTHER_USER, line.id, 1).kind == ErrorKind.FORBIDDEN
    assert cart_service.update_quantity(USER, 999, 1).kind == ErrorKind.NOT_FOUND
    assert cart_service.repo.get_line(USER, SHIRT).quantity == 2


def test_remove_item(cart_service):
    line = cart_service.add_to_cart(USER, SHIRT, 2)

    assert cart_service.remove_item(OTHER_USER, line.id).kind == ErrorKind.FORBIDDEN
    assert cart_service.repo.get_lines(USER) != []

    assert cart_service.remove_item(USER, line.id) is None
    assert cart_service.remove_item(USER, line.id) is None
    assert cart_service.repo.get_lines(USER) == []


def test_clear_cart(cart_service):
    cart_service.add_to_cart(USER, SHIRT)
    cart_service.add_to_cart(USER, SOCKS)

    assert cart_service.clear_cart(USER) == 2
    assert cart_service.get_priced_cart(USER).is_empty


def test_priced_cart_uses_live_catalog(cart_service, catalog):
    cart_service.add_to_cart(USER, SWEATER, 3)
    assert cart_service.get_priced_cart(USER).subtotal == 2400

    catalog.put(Product(id=SWEATER, name="Cotton Sweater", price=1500, category="clothing"))

    assert cart_service.get_priced_cart(USER).subtotal == 4500


def test_priced_cart_flags_deleted_and_out_of_stock(cart_service, catalog):
    cart_service.add_to_cart(USER, SHIRT, 1)
    cart_service.add_to_cart(USER, SOCKS, 1)

    catalog.delete(SOCKS)
    catalog.put(Product(id=SHIRT, name="Oxford Shirt", price=2000, category="clothing", in_stock=False))
    breakdown = cart_service.get_priced_cart(USER)

    assert [line.product_id for line in breakdown.unavailable] == [SOCKS]
    assert breakdown.blocks_checkout
    assert breakdown.subtotal == 2000


def test_priced_cart_is_idempotent(cart_service):
    cart_service.add_to_cart(USER, SHIRT, 2)
    cart_service.add_to_cart(USER, SOCKS, 1)

    assert cart_service.get_priced_cart(USER) == cart_service.get_priced_cart(USER)


def test_priced_cart_with_express_shipping(cart_service):
    cart_service.add_to_cart(USER, SHIRT, 1)

    breakdown = cart_service.get_priced_cart(USER, ShippingMethod.EXPRESS)

    assert breakdown.shipping == 1500
    assert breakdown.total == 2000 + 1500 + 160
