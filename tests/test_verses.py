import csv
import json

import pytest

import verses
from verses import (Book, Chapter, ParseError, ReadError, Record, Verse, WriteError,
                    books_to_json, group_records, parse_records, read_records,
                    vowel_count, write_books)

GENESIS_ROWS = [
    ["Genesis", "1", "1", "In the beginning"],
    ["Genesis", "1", "2", "And the earth was without form"],
    ["Genesis", "2", "1", "And God said"],
]

def records(rows):
    return [Record(row) for row in rows]

# * Scoring

@pytest.mark.parametrize("text, expected", [
    ("In the beginning", 5),
    ("And the earth was without form", 9),
    ("Shh", 0),
    ("", 0),
    ("AEIOU aeiou", 10),
    ("  Yy  ", 0),
    ("café naïve", 3),
])
def test_vowel_count(text, expected):
    assert vowel_count(text) == expected

# * Records

def test_record_fields():
    record = Record(["Genesis", "1", "2", "text"])

    assert record.book == "Genesis"
    assert record.chapter == 1
    assert record.verse == 2
    assert record.text == "text"

def test_record_numbers_parsed_lazily():
    record = Record(["book", "chapter", "verse", "text"], line_num=1)

    # Construction and text fields are fine
    assert record.book == "book"
    assert record.text == "text"

    with pytest.raises(ParseError, match="chapter"):
        record.chapter
    with pytest.raises(ParseError, match="verse"):
        record.verse

def test_record_missing_fields():
    record = Record(["Genesis", "1", "1"], line_num=3)

    assert record.verse == 1
    with pytest.raises(ParseError, match="Line 3: missing text"):
        record.text

def test_parse_records_keeps_first_row():
    lines = ["book,chapter,verse,text\n", "Genesis,1,1,In the beginning\n"]
    result = parse_records(lines)

    assert len(result) == 2
    assert result[0].book == "book"
    assert result[1].line_num == 2

def test_parse_records_quoted_text():
    result = parse_records(['Genesis,1,3,"And God said, Let there be light"\n'])

    assert result[0].text == "And God said, Let there be light"

def test_read_records(tmp_path):
    path = tmp_path / "verses.csv"
    path.write_text("Genesis,1,1,In the beginning\nGenesis,1,2,And the earth\n", encoding="utf-8")

    result = read_records(str(path))

    assert [(r.book, r.chapter, r.verse) for r in result] == [("Genesis", 1, 1), ("Genesis", 1, 2)]

def test_read_records_missing_file(tmp_path):
    with pytest.raises(ReadError):
        read_records(str(tmp_path / "missing.csv"))

def test_read_records_not_utf8(tmp_path):
    path = tmp_path / "verses.csv"
    path.write_bytes(b"Gen\xff,1,1,a\n")

    with pytest.raises(ReadError):
        read_records(str(path))

def test_read_records_field_too_large(tmp_path):
    path = tmp_path / "verses.csv"
    # Longer than the csv module's default field size limit
    path.write_text("Genesis,1,1," + "a" * (csv.field_size_limit() + 1) + "\n", encoding="utf-8")

    with pytest.raises(ParseError):
        read_records(str(path))

# * Grouping

def test_group_records_scenario():
    books = group_records(records(GENESIS_ROWS))

    assert len(books) == 1
    genesis = books[0]
    assert genesis.name == "Genesis"
    assert [c.number for c in genesis.chapters] == [1, 2]
    assert [(v.number, v.length) for v in genesis.chapters[0].verses] == [(1, 5), (2, 9)]
    assert [(v.number, v.length) for v in genesis.chapters[1].verses] == [(1, 4)]

def test_group_records_empty():
    assert group_records([]) == []

def test_group_records_first_seen_order():
    rows = [
        ["Exodus", "3", "1", "a"],
        ["Genesis", "1", "1", "a"],
        ["Exodus", "1", "1", "a"],
        ["Leviticus", "1", "1", "a"],
        ["Genesis", "1", "2", "a"],
    ]
    books = group_records(records(rows))

    assert [b.name for b in books] == ["Exodus", "Genesis", "Leviticus"]
    # Chapters are in first-seen order, not numeric order
    assert [c.number for c in books[0].chapters] == [3, 1]

def test_group_records_non_contiguous_chapter():
    rows = [
        ["Genesis", "1", "1", "a"],
        ["Genesis", "2", "1", "a"],
        ["Genesis", "1", "2", "a"],
    ]
    books = group_records(records(rows))

    chapters = books[0].chapters
    assert [c.number for c in chapters] == [1, 2]
    assert [v.number for v in chapters[0].verses] == [1, 2]

def test_group_records_chapters_scoped_by_book():
    rows = [
        ["Genesis", "1", "1", "a"],
        ["Exodus", "1", "1", "ee"],
        ["Exodus", "1", "2", "iii"],
    ]
    books = group_records(records(rows))

    assert [len(b.chapters[0].verses) for b in books] == [1, 2]
    assert [v.length for v in books[1].chapters[0].verses] == [2, 3]

def test_group_records_keeps_duplicate_verses():
    rows = [
        ["Genesis", "1", "1", "a"],
        ["Genesis", "1", "1", "aa"],
    ]
    books = group_records(records(rows))

    assert [(v.number, v.length) for v in books[0].chapters[0].verses] == [(1, 1), (1, 2)]

def test_group_records_verse_counts_match_input():
    rows = [[book, str(chapter), str(verse), "x"]
            for book in ("Ruth", "Jonah")
            for chapter in (1, 2, 3)
            for verse in range(1, chapter + 2)]
    books = group_records(records(rows))

    for book in books:
        for chapter in book.chapters:
            expected = len([r for r in rows if r[0] == book.name and int(r[1]) == chapter.number])
            assert len(chapter.verses) == expected

def test_group_records_bad_number():
    with pytest.raises(ParseError):
        group_records(records([["Genesis", "one", "1", "a"]]))

def test_equality_by_key():
    assert Book("Genesis", [Chapter(1)]) == Book("Genesis")
    assert Chapter(1, [Verse(1, 2)]) == Chapter(1)
    assert Verse(1, 2) == Verse(1, 5)
    assert Verse(1, 2) != Verse(2, 2)

# * Writing

def test_books_to_json():
    books = group_records(records(GENESIS_ROWS))

    assert books_to_json(books) == [
        {"name": "Genesis", "chapters": [
            {"number": 1, "verses": [{"number": 1, "length": 5}, {"number": 2, "length": 9}]},
            {"number": 2, "verses": [{"number": 1, "length": 4}]},
        ]},
    ]

def test_write_books(tmp_path):
    path = tmp_path / "verses.json"
    write_books(group_records(records(GENESIS_ROWS)), str(path))

    data = json.loads(path.read_text(encoding="utf-8"))
    assert [b["name"] for b in data] == ["Genesis"]
    assert list(data[0]["chapters"][0]) == ["number", "verses"]
    assert list(data[0]["chapters"][0]["verses"][0]) == ["number", "length"]

def test_write_books_unwritable(tmp_path):
    with pytest.raises(WriteError):
        write_books([], str(tmp_path / "missing" / "verses.json"))

def test_convert_empty_input(tmp_path):
    src = tmp_path / "verses.csv"
    src.write_text("", encoding="utf-8")
    dest = tmp_path / "verses.json"

    assert verses.convert(str(src), str(dest)) == []
    assert json.loads(dest.read_text(encoding="utf-8")) == []

def test_convert_idempotent(tmp_path):
    src = tmp_path / "verses.csv"
    src.write_text("Genesis,1,1,In the beginning\nExodus,1,1,Now these are the names\n",
                   encoding="utf-8")
    dest = tmp_path / "verses.json"

    verses.convert(str(src), str(dest))
    first = dest.read_text(encoding="utf-8")
    verses.convert(str(src), str(dest))

    assert dest.read_text(encoding="utf-8") == first
