# warehouse_inventory/db/seed.py
"""Fixed seed data present in every store after initialization.

Identities are stable so tests and scripts can refer to them directly.
"""

SEED_WAREHOUSES = [
    {'id': 1, 'location': 'Warehouse A'},
    {'id': 2, 'location': 'Warehouse B'},
]

SEED_ZONES = [
    {'id': 1, 'name': 'Cold Room 1', 'capacity': 100, 'warehouse_id': 1},
    {'id': 2, 'name': 'Rack A1', 'capacity': 200, 'warehouse_id': 1},
]
