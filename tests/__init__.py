"""
stockledger test suite

Tests are organized by layer:
- test_transaction_effects.py / test_inventory_ledger.py: ledger rules
- test_ledger_concurrency.py: concurrent movements on one product
- test_*_repository.py: product and category storage
- test_action_dispatcher.py / test_api_routes.py: request surface
"""
