import threading

from stockledger.errors import NegativeInventoryError
from stockledger.services.inventory_ledger import LedgerEngine


def test_concurrent_shipments_cannot_overdraw(app, store, products, widget):
    """Two shipments of 4 race for 5 units; exactly one may win."""
    barrier = threading.Barrier(2)
    outcomes = []
    lock = threading.Lock()

    def ship():
        engine = LedgerEngine(store)
        barrier.wait()
        try:
            engine.record_transaction(widget['id'], 4, 'shipping', 'race')
            result = 'ok'
        except NegativeInventoryError:
            result = 'rejected'
        with lock:
            outcomes.append(result)

    threads = [threading.Thread(target=ship) for _ in range(2)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=30)

    assert sorted(outcomes) == ['ok', 'rejected']
    assert products.get_product(widget['id'])['quantity'] == 1
    assert len(LedgerEngine(store).list_transactions(widget['id'])) == 1


def test_concurrent_receipts_are_all_applied(app, store, products, widget):
    workers = 5
    barrier = threading.Barrier(workers)
    errors = []

    def receive():
        barrier.wait()
        try:
            LedgerEngine(store).record_transaction(widget['id'], 2, 'receiving')
        except Exception as exc:  # surfaced through the assertion below
            errors.append(exc)

    threads = [threading.Thread(target=receive) for _ in range(workers)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=30)

    assert errors == []
    assert products.get_product(widget['id'])['quantity'] == 5 + 2 * workers
