import pytest
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from stockledger.services.product_repository import ProductRepository


def _ok(result):
    assert result['success'] is True, result
    return result['data']


def _fail(result):
    assert result['success'] is False, result
    assert result['data'] is None
    return result['message']


class TestEnvelope:

    def test_every_action_is_registered(self, dispatcher):
        assert dispatcher.actions == sorted([
            'product.list', 'product.get', 'product.create', 'product.update', 'product.delete',
            'category.list', 'category.get', 'category.create', 'category.update', 'category.delete',
            'category.addProduct', 'category.removeProduct', 'category.products',
            'transaction.list', 'transaction.get', 'transaction.create', 'transaction.update',
            'transaction.byProduct',
        ])

    @pytest.mark.parametrize('action, message', [
        (None, 'Action is required'),
        ('', 'Action is required'),
        ('warehouse.list', 'Unknown entity: warehouse'),
        ('product.explode', 'Unknown operation: explode'),
        ('product', 'Unknown operation: '),
    ])
    def test_routing_failures(self, dispatcher, action, message):
        assert _fail(dispatcher.invoke(action, {})) == message

    def test_params_must_be_an_object(self, dispatcher):
        assert _fail(dispatcher.invoke('product.list', ['x'])) == 'params must be an object'

    @pytest.mark.parametrize('bad_id', ['²', 'abc', 0])
    def test_malformed_id_is_a_validation_failure(self, dispatcher, bad_id):
        message = _fail(dispatcher.invoke('product.get', {'id': bad_id}))
        assert message.startswith('id must be')

    def test_oversized_price_is_a_validation_failure(self, dispatcher):
        message = _fail(dispatcher.invoke('product.create', {'name': 'x', 'sku': 'y', 'price': '1e30'}))
        assert message == 'price exceeds the maximum of 99999999.99'

    def test_missing_param(self, dispatcher):
        assert _fail(dispatcher.invoke('product.get', {})) == 'id is required'

    def test_default_success_message(self, dispatcher):
        result = dispatcher.invoke('product.list', None)
        assert result == {'success': True, 'data': [], 'message': 'Operation successful'}


class TestProductActions:

    def test_lifecycle(self, dispatcher):
        created = dispatcher.invoke('product.create', {'name': 'Lamp', 'sku': 'LMP-1', 'price': 20})
        assert created['message'] == 'Product created successfully'
        product_id = created['data']['id']

        assert _ok(dispatcher.invoke('product.get', {'id': product_id}))['sku'] == 'LMP-1'

        updated = dispatcher.invoke('product.update', {'id': product_id, 'changes': {'name': 'Desk Lamp'}})
        assert updated['message'] == 'Product updated successfully'
        assert updated['data']['name'] == 'Desk Lamp'

        deleted = dispatcher.invoke('product.delete', {'id': product_id})
        assert deleted == {'success': True, 'data': None, 'message': 'Product deleted successfully'}

        assert _fail(dispatcher.invoke('product.get', {'id': product_id})) == f"Product with ID {product_id} not found"

    def test_delete_missing(self, dispatcher):
        assert _fail(dispatcher.invoke('product.delete', {'id': 5})) == "Product with ID 5 not found"

    def test_validation_message_is_returned(self, dispatcher):
        assert _fail(dispatcher.invoke('product.create', {'name': 'x', 'sku': 'y'})) == 'price is required'


class TestCategoryActions:

    def test_links(self, dispatcher, widget):
        category = _ok(dispatcher.invoke('category.create', {'name': 'Lighting'}))
        params = {'categoryId': category['id'], 'productId': widget['id']}

        added = dispatcher.invoke('category.addProduct', params)
        assert added['message'] == 'Product added to category successfully'
        assert [p['id'] for p in _ok(dispatcher.invoke('category.products', {'id': category['id']}))] == [widget['id']]

        removed = dispatcher.invoke('category.removeProduct', params)
        assert removed['message'] == 'Product removed from category successfully'
        assert _fail(dispatcher.invoke('category.removeProduct', params)) == 'Product was not in the specified category'

    def test_update_and_delete(self, dispatcher):
        category = _ok(dispatcher.invoke('category.create', {'name': 'Lighting'}))
        renamed = dispatcher.invoke('category.update', {'id': category['id'], 'changes': {'name': 'Lamps'}})
        assert renamed['message'] == 'Category updated successfully'
        assert dispatcher.invoke('category.delete', {'id': category['id']})['message'] == 'Category deleted successfully'
        assert _fail(dispatcher.invoke('category.delete', {'id': category['id']})).endswith('not found')


class TestTransactionActions:

    def test_create_and_read(self, dispatcher, widget):
        created = dispatcher.invoke('transaction.create', {
            'product_id': widget['id'],
            'quantity': 3,
            'transaction_type': 'shipping',
            'notes': 'order 88',
        })
        assert created['message'] == 'Inventory transaction created successfully'
        entry = created['data']

        assert _ok(dispatcher.invoke('transaction.get', {'id': entry['id']}))['notes'] == 'order 88'
        assert [e['id'] for e in _ok(dispatcher.invoke('transaction.byProduct', {'productId': widget['id']}))] == [entry['id']]
        assert len(_ok(dispatcher.invoke('transaction.list', {}))) == 1
        assert _ok(dispatcher.invoke('product.get', {'id': widget['id']}))['quantity'] == 2

    def test_negative_inventory_is_reported(self, dispatcher, widget):
        message = _fail(dispatcher.invoke('transaction.create', {
            'product_id': widget['id'], 'quantity': 10, 'transaction_type': 'shipping',
        }))
        assert 'negative inventory' in message
        assert _ok(dispatcher.invoke('product.get', {'id': widget['id']}))['quantity'] == 5

    def test_immutable_update_is_reported(self, dispatcher, widget):
        entry = _ok(dispatcher.invoke('transaction.create', {
            'product_id': widget['id'], 'quantity': 1, 'transaction_type': 'receiving',
        }))
        message = _fail(dispatcher.invoke('transaction.update', {'id': entry['id'], 'changes': {'quantity': 9}}))
        assert message == 'Committed inventory transactions cannot change: quantity'

        notes = dispatcher.invoke('transaction.update', {'id': entry['id'], 'changes': {'notes': 'checked'}})
        assert notes['message'] == 'Transaction updated successfully'
        assert notes['data']['notes'] == 'checked'

    def test_flat_notes_update(self, dispatcher, widget):
        entry = _ok(dispatcher.invoke('transaction.create', {
            'product_id': widget['id'], 'quantity': 1, 'transaction_type': 'receiving',
        }))

        updated = _ok(dispatcher.invoke('transaction.update', {'id': entry['id'], 'notes': 'recounted'}))
        assert updated['notes'] == 'recounted'

        message = _fail(dispatcher.invoke('transaction.update', {'id': entry['id'], 'transaction_type': 'shipping'}))
        assert message == 'Committed inventory transactions cannot change: transaction_type'


class TestFailures:

    def test_store_failure_is_generic(self, dispatcher, monkeypatch):
        def _down(self):
            raise OperationalError("SELECT", {}, Exception("server closed the connection"))

        monkeypatch.setattr(ProductRepository, 'list_products', _down)
        # the raw driver error never reaches the envelope
        message = _fail(dispatcher.invoke('product.list', {}))
        assert 'server closed' not in message

    def test_unexpected_error_is_generic(self, dispatcher, monkeypatch):
        def _bug(self):
            raise KeyError('internal detail')

        monkeypatch.setattr(ProductRepository, 'list_products', _bug)
        assert _fail(dispatcher.invoke('product.list', {})) == 'Error processing request product.list'

    def test_store_failure_message(self, dispatcher, monkeypatch):
        def _down(*args, **kwargs):
            raise OperationalError("SELECT", {}, Exception("server closed the connection"))

        monkeypatch.setattr(Session, 'scalars', _down)
        message = _fail(dispatcher.invoke('category.list', {}))
        assert message == 'Failed to process category.list: inventory store unavailable'
