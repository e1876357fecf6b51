#!/usr/bin/env python3

# Divide a range of verses from verses.json into a daily reading plan,
# giving each day about the same total score.

# * Imports

# ** Standard library

import datetime
import json
import logging as log
import re

from collections import OrderedDict

# ** 3rd-party

from blessings import Terminal

import click
from click_default_group import DefaultGroup

# ** Local

from verses import (OUTPUT_FILENAME, Book, Chapter, Verse,
                    ParseError, PlanError, ReadError, VersesError)

# * Constants

TERM = Terminal()

# ** Key regexps

KEY_BOOK_CHAPTER_VERSE_REGEXP = re.compile(r"([^:]+) +(\d+):(\d+)$")

# * Classes

class DailyPlan():
    "The verses to read on DATE, from START to END, with their total LENGTH."

    def __init__(self, date, start, end=None, length=0):
        self.date = date
        self.start = start
        self.end = end
        self.length = length

    def __repr__(self):
        return "DailyPlan(%s, %s, %s, %s)" % (format_date(self.date), format_verse(self.start),
                                             format_verse(self.end) if self.end else None, self.length)

# * Functions

# ** Loading

def json_int(value):
    "Return VALUE if it is a JSON integer, else raise ValueError."

    # bool is a subclass of int, but true/false are not numbers here
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError("Not an integer: %r" % (value,))

    return value

def load_books(filename=OUTPUT_FILENAME):
    "Return list of Books loaded from JSON FILENAME, with chapters and verses linked to their parents."

    try:
        with open(filename, encoding='utf-8') as f:
            data = json.load(f)
    except OSError as e:
        raise ReadError("Unable to read %s: %s" % (filename, e)) from e
    except ValueError as e:
        # JSONDecodeError and UnicodeDecodeError are both ValueErrors
        raise ParseError("Unable to parse %s: %s" % (filename, e)) from e

    try:
        books = []
        for b in data:
            book = Book(b['name'])
            for c in b['chapters']:
                chapter = Chapter(json_int(c['number']), book=book)
                chapter.verses = [Verse(json_int(v['number']), json_int(v['length']), chapter=chapter)
                                  for v in c['verses']]
                book.chapters.append(chapter)
            books.append(book)
    except (KeyError, TypeError, ValueError) as e:
        raise ParseError("Unexpected structure in %s: %r" % (filename, e)) from e

    log.info("Loaded %s books from %s", len(books), filename)

    return books

# ** Navigation

def split_key(key):
    "Return book, chapter, and verse for KEY, e.g. \"Genesis 1:1\"."

    m = KEY_BOOK_CHAPTER_VERSE_REGEXP.match(key.strip())
    if not m:
        raise PlanError("Not a verse reference (BOOK CHAPTER:VERSE): %s" % key)

    return (m.group(1), int(m.group(2)), int(m.group(3)))

def find_book(books, name):
    "Return the Book in BOOKS called NAME."

    for book in books:
        if book.name == name:
            return book

    # Try again with NAME as a case-insensitive prefix
    for book in books:
        if book.name.lower().startswith(name.lower()):
            return book

    raise PlanError("No such book: %s" % name)

def find_verse(books, book, chapter, verse):
    "Return the Verse at BOOK CHAPTER:VERSE."

    b = find_book(books, book)
    for c in b.chapters:
        if c.number == chapter:
            for v in c.verses:
                if v.number == verse:
                    return v

    raise PlanError("No such verse: %s %s:%s" % (b.name, chapter, verse))

def first_verse(books):
    "Return the first verse of the first chapter of the first book."

    try:
        return books[0].chapters[0].verses[0]
    except IndexError as e:
        raise PlanError("No verses to plan") from e

def last_verse(books):
    "Return the last verse of the last chapter of the last book."

    try:
        return books[-1].chapters[-1].verses[-1]
    except IndexError as e:
        raise PlanError("No verses to plan") from e

def verse_key(verse):
    "Return (book, chapter, verse) tuple identifying VERSE."

    return (verse.chapter.book.name, verse.chapter.number, verse.number)

def next_verse(books, verse):
    """Return the verse read after VERSE.

    That is the next-numbered verse in the chapter, or else the first
    verse of the next-numbered chapter in the book, or else the first
    verse of the next book."""

    chapter = verse.chapter
    for v in chapter.verses:
        if v.number == verse.number + 1:
            return v

    book = chapter.book
    for c in book.chapters:
        if c.number == chapter.number + 1 and c.verses:
            return c.verses[0]

    # Match by identity: book names in a hand-edited file may repeat
    index = next(i for i, b in enumerate(books) if b is book) + 1
    try:
        return books[index].chapters[0].verses[0]
    except IndexError as e:
        raise PlanError("No verse after %s" % format_verse(verse)) from e

def verses_between(books, start, end):
    "Return list of verses from START to END, inclusive."

    result = []
    verse = start
    end_key = verse_key(end)
    while True:
        result.append(verse)
        if verse_key(verse) == end_key:
            break
        verse = next_verse(books, verse)

    return result

# ** Planning

def dates_between(start, end):
    "Return list of dates from START to END, inclusive."

    if end < start:
        raise PlanError("End date %s is before start date %s" % (format_date(end), format_date(start)))

    return [start + datetime.timedelta(days=n)
            for n in range((end - start).days + 1)]

def generate_plans(verses, dates, end=None):
    """Return list of DailyPlans dividing VERSES over DATES.

    Each day gets at least the average total length.  The overshoot is
    carried into the next day, so the plan does not drift ahead.  If
    verses remain after the last full day, they form a final plan
    ending at END (by default the last of VERSES)."""

    if end is None:
        end = verses[-1]

    target = sum(verse.length for verse in verses) / len(dates)
    log.debug("Target daily length: %s", target)

    plans = []
    date_index = 0
    actual_length = 0
    length = 0
    plan = None
    for verse in verses:
        if plan is None:
            # Extra plans, which only happen when every verse scores 0,
            # all go on the last day.
            plan = DailyPlan(dates[min(date_index, len(dates) - 1)], verse)
        length += verse.length
        actual_length += verse.length
        if length >= target:
            plan.end = verse
            plan.length = actual_length
            plans.append(plan)
            plan = None
            length -= target
            actual_length = 0
            date_index += 1

    if plan:
        plan.end = end
        plan.length = actual_length
        plans.append(plan)

    log.info("Planned %s verses over %s days", len(verses), len(plans))

    return plans

# ** Rendering

def format_verse(verse):
    "Return VERSE as \"Book Chapter:Verse\"."

    return "%s %s:%s" % (verse.chapter.book.name, verse.chapter.number, verse.number)

def format_date(date):
    "Return DATE as YEAR-MONTH-DAY, without zero padding."

    return "%s-%s-%s" % (date.year, date.month, date.day)

def format_plans(plans):
    "Return PLANS as tab-separated lines of date, first verse, and last verse."

    return "\n".join("%s\t%s\t%s" % (format_date(plan.date), format_verse(plan.start), format_verse(plan.end))
                     for plan in plans)

def render_plain(plans, color=False):
    "Print PLANS.  If COLOR is True, with dates and verse ranges highlighted."

    if not color:
        click.echo(format_plans(plans))
        return

    for plan in plans:
        click.secho("%s\t" % format_date(plan.date), bold=True, nl=False, color=True)
        click.echo(TERM.cyan + "%s\t%s" % (format_verse(plan.start), format_verse(plan.end)) + TERM.normal,
                   color=True)

def render_json(plans):
    "Print PLANS as JSON."

    print(json.dumps(list(plan_to_dict(plan) for plan in plans), indent=2))

def plan_to_dict(plan):
    "Return PLAN as an OrderedDict."

    return OrderedDict(date=plan.date.isoformat(), start=format_verse(plan.start),
                       end=format_verse(plan.end), length=plan.length)

# * Click

@click.group(cls=DefaultGroup, default='generate')
@click.option('-v', '--verbose', count=True)
def cli(verbose):
    "Main CLI function."

    # Setup logging
    if verbose >= 2:
        LOG_LEVEL = log.DEBUG
    elif verbose == 1:
        LOG_LEVEL = log.INFO
    else:
        LOG_LEVEL = log.WARNING

    log.basicConfig(level=LOG_LEVEL, format="%(levelname)s: %(message)s")

# ** Commands

# *** generate

@click.command()
@click.option('--from-ref', type=str, help='First verse, e.g. "Genesis 1:1".  Default: first verse.')
@click.option('--to-ref', type=str, help='Last verse.  Default: last verse.')
@click.option('--from-date', type=click.DateTime(formats=['%Y-%m-%d']), help='First day.  Default: today.')
@click.option('--to-date', type=click.DateTime(formats=['%Y-%m-%d']), help='Last day.  Default: December 31.')
@click.option('--output', type=click.Choice(['plain', 'json']), default='plain')
@click.option('--color', is_flag=True)
def generate(from_ref, to_ref, from_date, to_date, output, color):
    """Print a daily reading plan for verses.json."""

    try:
        books = load_books(OUTPUT_FILENAME)

        start = find_verse(books, *split_key(from_ref)) if from_ref else first_verse(books)
        end = find_verse(books, *split_key(to_ref)) if to_ref else last_verse(books)

        from_date = from_date.date() if from_date else datetime.date.today()
        to_date = to_date.date() if to_date else datetime.date(from_date.year, 12, 31)

        dates = dates_between(from_date, to_date)
        plans = generate_plans(verses_between(books, start, end), dates, end)
    except VersesError as e:
        raise click.ClickException(str(e))

    # Render result
    if output == 'plain':
        render_plain(plans, color=color)
    elif output == 'json':
        render_json(plans)

cli.add_command(generate)

# * Main

if __name__ == "__main__":
    cli()
