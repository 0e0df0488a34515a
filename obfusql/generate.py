"""Build the insert and update statements of an obfuscation script."""

from __future__ import annotations

import logging
import sys
from collections import defaultdict
from pathlib import Path
from typing import Callable, Optional

import yaml

from obfusql.formatter import Item, SQLFormatter

log = logging.getLogger(__name__)


class UserCancelled(Exception):
    """Raised when the user declines to overwrite an existing file."""


def _scalar(value: object, where: str) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (dict, list)):
        raise ValueError(f"expected a scalar for {where}, got {type(value).__name__}")
    return "" if value is None else str(value)


def _mapping(value: object, where: str) -> dict:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ValueError(f"expected a mapping for {where}, got {type(value).__name__}")
    return value


def _load_yaml(text: str) -> object:
    try:
        return yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ValueError(f"error unmarshaling YAML: {exc}") from exc


def read_items(yaml_path) -> list[Item]:
    """Read a table/column mapping file into a list of items."""
    text = Path(yaml_path).read_text(encoding="utf-8")
    mapping = _mapping(_load_yaml(text), "document")

    items = []
    for table, columns in mapping.items():
        table_name = _scalar(table, "table name")
        for column, details in _mapping(columns, f"table {table_name}").items():
            column_name = _scalar(column, "column name")
            details = _mapping(details, f"column {table_name}.{column_name}")
            generator = _scalar(details.get("source"), "source") or "null"
            items.append(
                Item(
                    table=table_name,
                    column=column_name,
                    sql_type=_scalar(details.get("type"), "type"),
                    generator=generator,
                )
            )
    return items


def generate_updates(config, formatter: SQLFormatter) -> str:
    """Return one update statement per table, tables and columns in sorted order."""
    try:
        items = read_items(Path.cwd() / config)
    except ValueError as exc:
        raise ValueError(f"error reading mapping file {config}: {exc}") from exc

    grouped: dict[str, list[Item]] = defaultdict(list)
    for item in items:
        grouped[item.table].append(item)

    statements = []
    for table in sorted(grouped):
        columns = sorted(grouped[table], key=lambda item: item.column)
        assignments = ",\n  ".join(formatter.format(item) for item in columns)
        statements.append(f'update "{table}" set {assignments};\n')
    return "".join(statements)


def merge_data(text: str, data: dict[str, list[str]]) -> dict[str, list[str]]:
    """Append the kind -> values lists of a YAML document to ``data`` and return it."""
    parsed = _mapping(_load_yaml(text), "document")
    for kind, values in parsed.items():
        kind_name = _scalar(kind, "kind")
        if values is None:
            values = []
        if not isinstance(values, list):
            raise ValueError(f"expected a list of values for {kind_name}")
        data.setdefault(kind_name, []).extend(_scalar(v, kind_name) for v in values)
    return data


def load_data_file(path, data: dict[str, list[str]]) -> dict[str, list[str]]:
    """Merge the data of the YAML file at ``path`` into ``data``."""
    return merge_data(Path(path).read_text(encoding="utf-8"), data)


def generate_inserts(data: dict[str, list[str]]) -> str:
    """Return one insert into the anonymised data table for every value."""
    return "".join(
        "insert into gobfuscator_anon_data (idx, kind, value) values "
        f"({index}, '{kind}', '{value.replace(chr(39), chr(39) * 2)}');\n"
        for kind, values in data.items()
        for index, value in enumerate(values)
    )


def _ask_stdin(path: Path) -> bool:
    print(f"File {path} already exists. Overwrite? (y/n): ", end="", flush=True)
    response = sys.stdin.readline()
    if not response.endswith("\n"):
        raise EOFError("error reading input")
    return response.strip().lower() in ("y", "yes")


def write_to_file(
    path, content: str, confirm: Optional[Callable[[Path], bool]] = None
) -> int:
    """Write ``content`` to ``path`` and return the number of bytes written.

    If the file exists, ``confirm`` (by default a prompt on standard input)
    decides whether it is overwritten; declining raises UserCancelled.
    """
    target = Path(path)
    if target.exists():
        ask = confirm if confirm is not None else _ask_stdin
        if not ask(target):
            raise UserCancelled("operation cancelled by user")

    target.parent.mkdir(parents=True, exist_ok=True)
    encoded = content.encode("utf-8")
    with target.open("wb") as output:
        output.write(encoded)

    log.info("Successfully wrote: %s", target)
    return len(encoded)