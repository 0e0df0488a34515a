"""SQL expressions that replace column values with anonymised data."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable


@dataclass(frozen=True)
class Item:
    """One column of one table, with the generator that supplies its new value."""

    table: str
    column: str
    sql_type: str
    generator: str


SQLFormat = Callable[[Item], str]

# Generator name -> SQLFormatter field; anything else uses ``default``.
_GENERATOR_FIELDS = {
    "phone-numbers": "phone_number",
    "email": "email",
    "words": "word",
    "null": "null",
    "addresses-1": "address",
    "businesses": "business",
}


@dataclass(frozen=True)
class SQLFormatter:
    """Builds the ``column = expression`` fragment of an update for each generator."""

    phone_number: SQLFormat
    email: SQLFormat
    word: SQLFormat
    null: SQLFormat
    address: SQLFormat
    business: SQLFormat
    default: SQLFormat

    def format(self, item: Item) -> str:
        """Return the assignment for ``item`` using the function for its generator."""
        field = _GENERATOR_FIELDS.get(item.generator, "default")
        return getattr(self, field)(item)


def cast(sql_type: str) -> str:
    """Return the PostgreSQL cast suffix needed for ``sql_type``."""
    return {"jsonb": "::jsonb", "date": "::date"}.get(sql_type, "")


def _lookup(item: Item) -> str:
    return (
        "(select value "
        "from gobfuscator_anon_data "
        f"where kind = '{item.generator}' "
        f"and idx = mod(\"{item.table}\".id, (select total from gobfuscater.gobfuscater_data_census "
        f"where kind = '{item.generator}')) "
        f"limit 1){cast(item.sql_type)}"
    )


def _phone_number(item: Item) -> str:
    return (
        f"{item.column} = lpad(\"{item.table}\".id::text || "
        f"\"{item.table}\".id::text, 15, '0')"
    )


def _email(item: Item) -> str:
    return f"{item.column} = \"{item.table}\".id::text || '@example.com'"


def _word(item: Item) -> str:
    return f"{item.column} = ''"


def _null(item: Item) -> str:
    return f"{item.column} = NULL"


def _address(item: Item) -> str:
    return f"{item.column} = \"{item.table}\".id::text || ' ' || {_lookup(item)}"


def _lookup_with_id(item: Item) -> str:
    return f"{item.column} = {_lookup(item)} || ' ' || \"{item.table}\".id::text"


def postgres_formatter() -> SQLFormatter:
    """Return the formatter for the PostgreSQL dialect."""
    return SQLFormatter(
        phone_number=_phone_number,
        email=_email,
        word=_word,
        null=_null,
        address=_address,
        business=_lookup_with_id,
        default=_lookup_with_id,
    )