import pytest

from stockledger.errors import NotFoundError, ValidationError


class TestProductRepository:

    def test_create_and_get_round_trip(self, products):
        created = products.create_product({
            'name': ' Bolt ',
            'sku': 'BLT-10',
            'price': 0.5,
            'description': 'M10 bolt',
        })

        fetched = products.get_product(created['id'])
        assert fetched == created
        assert fetched['name'] == ' Bolt '
        assert fetched['price'] == '0.50'
        assert fetched['quantity'] == 0
        assert fetched['created_at'].endswith('+00:00')

    def test_create_with_initial_quantity(self, widget):
        assert widget['quantity'] == 5

    @pytest.mark.parametrize('fields, message', [
        ({'sku': 'A', 'price': 1}, 'name is required'),
        ({'name': 'A', 'price': 1}, 'sku is required'),
        ({'name': 'A', 'sku': 'A'}, 'price is required'),
        ({'name': 'A', 'sku': 'A', 'price': -1}, 'price cannot be negative'),
        ({'name': 'A', 'sku': 'A', 'price': 'abc'}, 'price must be a number'),
        ({'name': 'A', 'sku': 'A', 'price': 1, 'quantity': -1}, 'quantity cannot be negative'),
        ({'name': 'A' * 256, 'sku': 'A', 'price': 1}, 'name must be at most 255 characters'),
        ({'name': '   ', 'sku': 'A', 'price': 1}, 'name is required'),
        ({'name': 'A', 'sku': 'A', 'price': '1e30'}, 'price exceeds the maximum of 99999999.99'),
        ({'name': 'A', 'sku': 'A', 'price': '99999999.999'}, 'price exceeds the maximum of 99999999.99'),
        ({'name': 'A', 'sku': 'A', 'price': 1, 'quantity': '²'}, 'quantity must be an integer'),
    ])
    def test_create_validation(self, products, fields, message):
        with pytest.raises(ValidationError) as excinfo:
            products.create_product(fields)
        assert excinfo.value.message == message

    def test_duplicate_sku(self, products, widget):
        with pytest.raises(ValidationError) as excinfo:
            products.create_product({'name': 'Copy', 'sku': widget['sku'], 'price': 1})
        assert 'SKU' in excinfo.value.message

    def test_list_is_ordered_by_name(self, products):
        for name, sku in (('Zeta', 'Z'), ('Alpha', 'A'), ('Mid', 'M')):
            products.create_product({'name': name, 'sku': sku, 'price': 1})
        assert [p['name'] for p in products.list_products()] == ['Alpha', 'Mid', 'Zeta']

    def test_partial_update_changes_only_given_fields(self, products, widget):
        updated = products.update_product(widget['id'], {'price': '12.5'})

        assert updated['price'] == '12.50'
        assert updated['name'] == widget['name']
        assert updated['sku'] == widget['sku']
        assert updated['description'] == widget['description']
        assert updated['quantity'] == widget['quantity']
        assert updated['updated_at'] >= widget['updated_at']

    def test_empty_update_still_succeeds(self, products, widget):
        updated = products.update_product(widget['id'], {})
        assert updated['name'] == widget['name']

    def test_description_can_be_cleared(self, products, widget):
        assert products.update_product(widget['id'], {'description': None})['description'] is None

    def test_quantity_cannot_be_patched(self, products, widget):
        with pytest.raises(ValidationError):
            products.update_product(widget['id'], {'quantity': 100})
        assert products.get_product(widget['id'])['quantity'] == 5

    def test_unknown_field_is_refused(self, products, widget):
        with pytest.raises(ValidationError):
            products.update_product(widget['id'], {'colour': 'red'})

    def test_update_missing_product(self, products):
        with pytest.raises(NotFoundError):
            products.update_product(77, {'name': 'ghost'})

    def test_get_missing_product(self, products):
        with pytest.raises(NotFoundError) as excinfo:
            products.get_product(77)
        assert excinfo.value.message == "Product with ID 77 not found"

    @pytest.mark.parametrize('bad_id', ['abc', 0, -3, True, None, 1.5, '²', '٣'])
    def test_bad_ids(self, products, bad_id):
        with pytest.raises(ValidationError):
            products.get_product(bad_id)

    def test_delete_cascades_to_ledger_and_links(self, products, categories, ledger, widget):
        category = categories.create_category({'name': 'Hardware'})
        categories.add_product(category['id'], widget['id'])
        ledger.record_transaction(widget['id'], 3, 'receiving')

        assert products.delete_product(widget['id']) is True

        with pytest.raises(NotFoundError):
            products.get_product(widget['id'])
        assert products.list_products_in_category(category['id']) == []
        assert ledger.list_transactions() == []

    def test_delete_missing_product(self, products):
        assert products.delete_product(4242) is False

    def test_list_products_in_missing_category(self, products):
        with pytest.raises(NotFoundError):
            products.list_products_in_category(31)

    def test_oversized_price_update_is_refused(self, products, widget):
        with pytest.raises(ValidationError):
            products.update_product(widget['id'], {'price': '1e30'})
        assert products.get_product(widget['id'])['price'] == '9.99'
