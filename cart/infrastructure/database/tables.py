"""
Relational Schema

    cafe(id PK, name)
    cafe_orders(id PK, coffee, username, quantity)
"""

from sqlalchemy import Column, Integer, MetaData, String, Table

metadata = MetaData()

cafe = Table(
    "cafe",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", String(255), nullable=False),
)

cafe_orders = Table(
    "cafe_orders",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("coffee", String(255), nullable=False),
    Column("username", String(255), nullable=False),
    Column("quantity", Integer, nullable=False),
)
