"""
Relational persistence (SQLAlchemy async Core).

- **engine.py**: Engine lifecycle and schema creation
- **tables.py**: `cafe` and `cafe_orders` tables
- **order_store.py**: Order persistence
- **coffee_store.py**: Menu mirror
"""
