from dataclasses import dataclass

from sqlalchemy import Column, Float, MetaData, String, Table, Text


@dataclass
class Ad:
    id: str
    image_url: str
    action: str
    action_type: str


@dataclass
class Category:
    id: str
    name: str
    image_url: str


@dataclass
class Product:
    id: str
    name: str
    description: str
    price: float
    image_url: str
    category_id: str


def build_ads_table(metadata: MetaData, name: str) -> Table:
    return Table(
        name,
        metadata,
        Column("id", String(36), primary_key=True),
        Column("image_url", String(1024), nullable=False, default=""),
        Column("action", String(1024), nullable=False, default=""),
        Column("action_type", String(64), nullable=False, default=""),
    )


def build_categories_table(metadata: MetaData, name: str) -> Table:
    return Table(
        name,
        metadata,
        Column("id", String(36), primary_key=True),
        Column("name", String(255), nullable=False),
        Column("image_url", String(1024), nullable=False, default=""),
    )


def build_products_table(metadata: MetaData, name: str) -> Table:
    return Table(
        name,
        metadata,
        Column("id", String(36), primary_key=True),
        Column("name", String(255), nullable=False),
        Column("description", Text, nullable=False, default=""),
        Column("price", Float, nullable=False),
        Column("image_url", String(1024), nullable=False, default=""),
        Column("category_id", String(36), nullable=False, index=True),
    )
