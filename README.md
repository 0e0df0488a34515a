# obfusql

`obfusql` builds SQL statements that replace sensitive column values in a
PostgreSQL database with anonymised ones. You describe which tables and
columns hold personal data and how each one should be rewritten; `obfusql`
produces the `update` statements for them, plus `insert` statements that load
the pool of replacement values those updates draw from.

It is a library: you call its functions from Python and decide yourself how
to combine and run the resulting SQL.

## Describing the columns

The column mapping is a YAML file keyed by table, then by column. Each column
gives its SQL `type` and the `source` of its replacement values:

```yaml
users:
  email:
    type: text
    source: email
  phone:
    type: text
    source: phone-numbers
  notes:
    type: text
    source: null
companies:
  name:
    type: text
    source: businesses
```

Sources understood by the PostgreSQL formatter (`postgres_formatter()`):

| source          | replacement                                                     |
|-----------------|-----------------------------------------------------------------|
| `phone-numbers` | the row id, repeated and left-padded with zeros to 15 digits    |
| `email`         | `<id>@example.com`                                              |
| `words`         | an empty string                                                 |
| `null` or empty | `NULL`                                                          |
| `addresses-1`   | the row id followed by a value of that kind from the data pool  |
| `businesses`    | a value of that kind from the data pool followed by the row id  |
| anything else   | a value of that kind from the data pool followed by the row id  |

Pooled values for columns of type `jsonb` or `date` are cast to that type
(see `cast`).

## Generating the update statements

```python
from obfusql.formatter import postgres_formatter
from obfusql.generate import generate_updates

sql = generate_updates("mapping.yaml", postgres_formatter())
print(sql)
```

The mapping path is taken relative to the current working directory. Tables
come out in alphabetical order, one `update` per table, and the columns of
each table are sorted too:

```sql
update "users" set email = "users".id::text || '@example.com',
  notes = NULL,
  phone = lpad("users".id::text || "users".id::text, 15, '0');
```

A mapping that is not valid YAML, or whose tables and columns are not
mappings, raises `ValueError`; a missing file raises the usual `OSError`.

`read_items` returns the parsed mapping as a list of `Item` objects
(`table`, `column`, `sql_type`, `generator`), and `SQLFormatter.format`
renders the assignment for a single item.

## Generating the data pool

Replacement values live in YAML files that map a kind to a list of values:

```yaml
businesses:
  - Acme Widgets
  - O'Neill Supply
```

Merge one or more such documents into a dictionary and turn it into
`insert` statements:

```python
from obfusql.generate import generate_inserts, load_data_file, merge_data

data: dict[str, list[str]] = {}
load_data_file("values.yaml", data)
merge_data("extra:\n  - one\n  - two\n", data)

print(generate_inserts(data))
```

Values of a kind are appended in the order they are merged and numbered from
zero; single quotes are doubled:

```sql
insert into gobfuscator_anon_data (idx, kind, value) values (1, 'businesses', 'O''Neill Supply');
```

## Writing the result

`write_to_file` creates any missing parent directories, writes the content as
UTF-8 and returns the number of bytes written. If the file already exists,
`confirm` is called with its path before it is overwritten; without a
`confirm` function the user is asked on standard input. Declining raises
`UserCancelled`.

```python
from pathlib import Path

from obfusql.generate import UserCancelled, write_to_file


def confirm(path: Path) -> bool:
    return False  # never overwrite


try:
    write_to_file("out/obfuscate.sql", sql, confirm)
except UserCancelled:
    print("left the existing file alone")
```

## What it does not do

- There is no command-line tool; everything is done through the functions
  above.
- No default pool of replacement values is bundled: every value comes from
  the data you merge yourself.
- It does not wrap the statements in a complete script. Creating the
  `gobfuscator_anon_data` table and the `gobfuscater.gobfuscater_data_census`
  table of per-kind totals that the updates refer to, and running the SQL
  against a database, is left to you.
- PostgreSQL is the only dialect provided.

## Running the tests

Install the `test` extra and run `pytest` from the project root.