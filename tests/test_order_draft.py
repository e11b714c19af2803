import pytest

from services.order_draft import DraftError, OrderDraft, parse_amount

CATALOG = {1: {'id': 1, 'name': 'Brownies', 'price': 50000}, 2: {'id': 2, 'name': 'Nastar', 'price': 12500}}


def test_parse_amount():
    assert parse_amount('3') == 3
    assert parse_amount(' 1.000 ') == 1000
    assert parse_amount('') == 0
    assert parse_amount(None) == 0
    assert parse_amount(5) == 5


def test_add_product_increments_existing_line():
    draft = OrderDraft()
    draft.add_product(1)
    draft.add_product(2)
    draft.add_product(1)
    assert [(l['productId'], l['amount']) for l in draft] == [(1, 2), (2, 1)]
    assert draft.total(CATALOG) == 2 * 50000 + 12500


def test_set_amount_zero_removes_line():
    draft = OrderDraft([{'productId': 1, 'amount': 2}, {'productId': 2, 'amount': 1}])
    draft.set_amount(0, '5')
    assert draft.lines[0]['amount'] == 5
    draft.set_amount('1', '0')
    assert len(draft) == 1


def test_zero_amount_lines_are_dropped_on_load():
    draft = OrderDraft([{'productId': 1, 'amount': 0}, {'productId': 2, 'amount': '2'}])
    assert [l['productId'] for l in draft] == [2]


def test_add_custom_validation():
    draft = OrderDraft()
    with pytest.raises(DraftError, match='name is required'):
        draft.add_custom('  ', 1000)
    with pytest.raises(DraftError, match='must be an integer'):
        draft.add_custom('Box', 'ten')
    with pytest.raises(DraftError, match='positive'):
        draft.add_custom('Box', -5)
    draft.add_custom(' Box ', '15000', notes='  ')
    assert draft.lines == [{'itemType': 'custom', 'customName': 'Box', 'customPrice': 15000, 'notes': None}]


def test_remove_unknown_line():
    draft = OrderDraft([{'productId': 1, 'amount': 1}])
    with pytest.raises(DraftError):
        draft.remove(3)
    with pytest.raises(DraftError):
        draft.remove('x')
    draft.remove('0')
    assert len(draft) == 0


def test_to_payload_omits_optional_keys():
    draft = OrderDraft([
        {'itemType': 'product', 'productId': 1, 'amount': 2, 'priceAtSale': 50000},
        {'itemType': 'product', 'productId': 2, 'amount': 1, 'priceAtSale': 10000, 'notes': 'no sugar'},
        {'itemType': 'custom', 'customName': 'Gift box', 'customPrice': 15000},
    ])
    assert draft.to_payload(CATALOG) == [
        {'itemType': 'product', 'productId': 1, 'amount': 2},
        {'itemType': 'product', 'productId': 2, 'amount': 1, 'priceAtSale': 10000, 'notes': 'no sugar'},
        {'itemType': 'custom', 'customName': 'Gift box', 'customPrice': 15000},
    ]


def test_from_order_keeps_backend_lines():
    order = {'items': [
        {'id': 5, 'itemType': 'product', 'productId': 1, 'amount': 3, 'priceAtSale': 45000},
        {'id': 6, 'itemType': 'custom', 'customName': 'Candles', 'customPrice': 5000, 'notes': 'pink'},
    ]}
    draft = OrderDraft.from_order(order)
    assert draft.total(CATALOG) == 3 * 45000 + 5000
    assert draft.to_payload(CATALOG)[1]['notes'] == 'pink'
