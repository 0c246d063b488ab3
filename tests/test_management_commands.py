from sqlalchemy import update

from stockledger.models import Product


def test_verify_ledger_passes_on_consistent_history(runner, ledger, widget):
    ledger.record_transaction(widget['id'], 2, 'shipping')

    result = runner.invoke(args=['verify-ledger'])

    assert result.exit_code == 0
    assert 'consistent' in result.output


def test_verify_ledger_fails_on_mismatch(runner, store, ledger, widget):
    ledger.record_transaction(widget['id'], 5, 'shipping')
    with store.unit_of_work() as session:
        session.execute(update(Product).where(Product.id == widget['id']).values(quantity=-1))

    result = runner.invoke(args=['verify-ledger', '--product-id', str(widget['id'])])

    assert result.exit_code == 1
    assert widget['sku'] in result.output


def test_init_db_is_repeatable(runner):
    result = runner.invoke(args=['init-db'])
    assert result.exit_code == 0
    assert 'created' in result.output
