# Read a CSV list of verses, group it by book and chapter, score each
# verse by counting its vowels, and write the result as JSON.

# * Imports

# ** Standard library

import csv
import json
import logging as log

from collections import OrderedDict

# * Constants

INPUT_FILENAME = "verses.csv"
OUTPUT_FILENAME = "verses.json"

VOWELS = frozenset("aeiou")

# * Exceptions

class VersesError(Exception):
    "Base class for errors raised while converting or planning verses."

class ReadError(VersesError):
    "An input file could not be opened or read."

class ParseError(VersesError):
    "A row or document does not have the expected fields."

class WriteError(VersesError):
    "The output file could not be created or written."

class PlanError(VersesError):
    "A reading plan could not be built from the given range."

# * Classes

class Record():
    """One row of the input file.

    Fields are kept as the strings the CSV reader returned.  Chapter
    and verse numbers are only converted when they are used, so a bad
    value is reported by the first code that reads it."""

    def __init__(self, row, line_num=None):
        self.row = row
        self.line_num = line_num

    def _field(self, index, name):
        try:
            return self.row[index]
        except IndexError as e:
            raise ParseError("Line %s: missing %s field in %r"
                             % (self.line_num, name, self.row)) from e

    def _number(self, index, name):
        value = self._field(index, name)
        try:
            return int(value)
        except ValueError as e:
            raise ParseError("Line %s: %s is not a number: %r"
                             % (self.line_num, name, value)) from e

    @property
    def book(self):
        return self._field(0, 'book')

    @property
    def chapter(self):
        return self._number(1, 'chapter')

    @property
    def verse(self):
        return self._number(2, 'verse')

    @property
    def text(self):
        return self._field(3, 'text')

    def __repr__(self):
        return "Record(%r)" % (self.row,)

class Verse():
    "A verse number and its score.  Two verses are equal when their numbers are."

    def __init__(self, number, length, chapter=None):
        self.number = number
        self.length = length
        # Only set on trees loaded for planning
        self.chapter = chapter

    def __eq__(self, other):
        if not isinstance(other, Verse):
            return NotImplemented
        return self.number == other.number

    def __hash__(self):
        return hash(self.number)

    def __repr__(self):
        return "Verse(%r, %r)" % (self.number, self.length)

class Chapter():
    "A chapter number and its verses, in input order."

    def __init__(self, number, verses=None, book=None):
        self.number = number
        self.verses = verses if verses is not None else []
        self.book = book

    def __eq__(self, other):
        if not isinstance(other, Chapter):
            return NotImplemented
        return self.number == other.number

    def __hash__(self):
        return hash(self.number)

    def __repr__(self):
        return "Chapter(%r, %r)" % (self.number, self.verses)

class Book():
    "A book name and its chapters, in first-seen order."

    def __init__(self, name, chapters=None):
        self.name = name
        self.chapters = chapters if chapters is not None else []

    def __eq__(self, other):
        if not isinstance(other, Book):
            return NotImplemented
        return self.name == other.name

    def __hash__(self):
        return hash(self.name)

    def __repr__(self):
        return "Book(%r, %r)" % (self.name, self.chapters)

# * Functions

# ** Reading

def parse_records(lines):
    "Return a list of Records for the CSV LINES (any iterable of strings)."

    reader = csv.reader(lines)

    # NOTE: There is no header detection.  A header row becomes a
    # record like any other, and fails when its chapter is read.
    return [Record(row, line_num=reader.line_num)
            for row in reader]

def read_records(filename=INPUT_FILENAME):
    "Return a list of Records read from CSV file FILENAME."

    try:
        with open(filename, newline='', encoding='utf-8') as f:
            records = parse_records(f)
    except (OSError, UnicodeDecodeError) as e:
        raise ReadError("Unable to read %s: %s" % (filename, e)) from e
    except csv.Error as e:
        raise ParseError("Unable to parse %s: %s" % (filename, e)) from e

    log.info("Read %s records from %s", len(records), filename)

    return records

# ** Scoring

def vowel_count(text):
    "Return the number of vowels (a, e, i, o, u) in TEXT."

    return sum(1 for c in text.lower().strip()
               if c in VOWELS)

# ** Grouping

def group_records(records):
    """Return a list of Books built from RECORDS.

    Books appear in the order their names are first seen, and chapters
    in the order they are first seen within their book.  Rows don't
    have to be sorted: a chapter that shows up again later is added to
    its existing group.  Verses keep input order and are not
    de-duplicated."""

    books = OrderedDict()

    for record in records:
        chapters = books.setdefault(record.book, OrderedDict())
        verses = chapters.setdefault(record.chapter, [])
        verses.append(Verse(record.verse, vowel_count(record.text)))

    result = []
    for name, chapters in books.items():
        log.debug("%s: %s chapters", name, len(chapters))
        result.append(Book(name, [Chapter(number, verses)
                                  for number, verses in chapters.items()]))

    return result

# ** Writing

def books_to_json(books):
    "Return BOOKS as a list of OrderedDicts ready for json.dump."

    return [OrderedDict(name=book.name,
                        chapters=[OrderedDict(number=chapter.number,
                                              verses=[OrderedDict(number=verse.number, length=verse.length)
                                                      for verse in chapter.verses])
                                  for chapter in book.chapters])
            for book in books]

def write_books(books, filename=OUTPUT_FILENAME):
    "Write BOOKS to FILENAME as JSON."

    try:
        with open(filename, 'w', encoding='utf-8') as f:
            json.dump(books_to_json(books), f, ensure_ascii=False)
    except OSError as e:
        raise WriteError("Unable to write %s: %s" % (filename, e)) from e

    log.info("Wrote %s books to %s", len(books), filename)

def convert(input_filename=INPUT_FILENAME, output_filename=OUTPUT_FILENAME):
    "Read INPUT_FILENAME, group and score its verses, and write them to OUTPUT_FILENAME."

    books = group_records(read_records(input_filename))
    write_books(books, output_filename)

    return books
