import io

import pytest

from obfusql.formatter import Item, SQLFormatter, postgres_formatter
from obfusql.generate import (
    UserCancelled,
    generate_inserts,
    generate_updates,
    load_data_file,
    merge_data,
    read_items,
    write_to_file,
)

MAPPING = """\
zebra:
  b_col:
    type: text
    source: email
  a_col:
    type: jsonb
    source: cities
apple:
  notes:
    type: text
  extra:
    type: text
    source: "null"
"""


def _column_formatter():
    def f(item):
        return f"{item.column}=x"

    return SQLFormatter(f, f, f, f, f, f, f)


def test_read_items(tmp_path):
    path = tmp_path / "map.yaml"
    path.write_text(MAPPING)
    items = read_items(path)
    assert set(items) == {
        Item("zebra", "b_col", "text", "email"),
        Item("zebra", "a_col", "jsonb", "cities"),
        Item("apple", "notes", "text", "null"),
        Item("apple", "extra", "text", "null"),
    }


def test_read_items_invalid_yaml(tmp_path):
    path = tmp_path / "bad.yaml"
    path.write_text("a: [unclosed\n")
    with pytest.raises(ValueError):
        read_items(path)


def test_read_items_wrong_shape(tmp_path):
    path = tmp_path / "list.yaml"
    path.write_text("- one\n- two\n")
    with pytest.raises(ValueError):
        read_items(path)


def test_read_items_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        read_items(tmp_path / "absent.yaml")


def test_generate_updates_sorted(tmp_path, monkeypatch):
    (tmp_path / "map.yaml").write_text(MAPPING)
    monkeypatch.chdir(tmp_path)
    result = generate_updates("map.yaml", _column_formatter())
    assert result == (
        'update "apple" set extra=x,\n  notes=x;\n'
        'update "zebra" set a_col=x,\n  b_col=x;\n'
    )


def test_generate_updates_with_postgres(tmp_path, monkeypatch):
    (tmp_path / "map.yaml").write_text(MAPPING)
    monkeypatch.chdir(tmp_path)
    result = generate_updates("map.yaml", postgres_formatter())
    assert result.count("update ") == 2
    assert "notes = NULL" in result
    assert result.index('"apple"') < result.index('update "zebra"')


def test_generate_updates_bad_file(tmp_path, monkeypatch):
    (tmp_path / "map.yaml").write_text("x: [\n")
    monkeypatch.chdir(tmp_path)
    with pytest.raises(ValueError, match="map.yaml"):
        generate_updates("map.yaml", postgres_formatter())


def test_merge_data_appends():
    data = {"words": ["alpha"]}
    result = merge_data("words:\n  - beta\ncities:\n  - Springfield\n", data)
    assert result is data
    assert data == {"words": ["alpha", "beta"], "cities": ["Springfield"]}


def test_merge_data_twice_extends():
    data = {}
    merge_data("k: [a]\n", data)
    merge_data("k: [b]\n", data)
    assert data == {"k": ["a", "b"]}


def test_merge_data_rejects_non_list():
    with pytest.raises(ValueError):
        merge_data("k: {nested: 1}\n", {})


def test_load_data_file(tmp_path):
    path = tmp_path / "data.yaml"
    path.write_text("animals:\n  - cat\n  - dog\n")
    assert load_data_file(path, {}) == {"animals": ["cat", "dog"]}


def test_load_data_file_missing(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_data_file(tmp_path / "none.yaml", {})


def test_generate_inserts_escapes_quotes():
    result = generate_inserts({"words": ["it's"]})
    assert result == (
        "insert into gobfuscator_anon_data (idx, kind, value) values (0, 'words', 'it''s');\n"
    )


def test_generate_inserts_indexes_per_kind():
    data = {"a": ["x", "y", "z"], "b": ["w"]}
    lines = generate_inserts(data).splitlines()
    assert len(lines) == 4
    assert sum("values (0," in line for line in lines) == 2
    assert sum("values (2," in line for line in lines) == 1


def test_generate_inserts_empty():
    assert generate_inserts({}) == ""


def test_write_new_file_creates_dirs(tmp_path):
    target = tmp_path / "out" / "nested" / "script.sql"
    written = write_to_file(target, "select 1;\n", confirm=lambda p: False)
    assert written == len("select 1;\n")
    assert target.read_text() == "select 1;\n"


def test_write_counts_bytes(tmp_path):
    target = tmp_path / "u.sql"
    content = "café"
    assert write_to_file(target, content) == len(content.encode("utf-8"))
    assert target.read_text(encoding="utf-8") == content


def test_write_existing_declined(tmp_path):
    target = tmp_path / "x.sql"
    target.write_text("old")
    with pytest.raises(UserCancelled):
        write_to_file(target, "new", confirm=lambda p: False)
    assert target.read_text() == "old"


def test_write_existing_confirmed(tmp_path):
    target = tmp_path / "x.sql"
    target.write_text("old")
    seen = []
    write_to_file(target, "new", confirm=lambda p: seen.append(p) or True)
    assert target.read_text() == "new"
    assert seen == [target]


@pytest.mark.parametrize("answer, expected", [("yes\n", "new"), ("Y\n", "new")])
def test_write_prompt_accepts(tmp_path, monkeypatch, answer, expected):
    target = tmp_path / "x.sql"
    target.write_text("old")
    monkeypatch.setattr("sys.stdin", io.StringIO(answer))
    write_to_file(target, "new")
    assert target.read_text() == expected


def test_write_prompt_declines(tmp_path, monkeypatch):
    target = tmp_path / "x.sql"
    target.write_text("old")
    monkeypatch.setattr("sys.stdin", io.StringIO("n\n"))
    with pytest.raises(UserCancelled):
        write_to_file(target, "new")
    assert target.read_text() == "old"


def test_write_prompt_end_of_input(tmp_path, monkeypatch):
    target = tmp_path / "x.sql"
    target.write_text("old")
    monkeypatch.setattr("sys.stdin", io.StringIO(""))
    with pytest.raises(EOFError):
        write_to_file(target, "new")
    assert target.read_text() == "old"