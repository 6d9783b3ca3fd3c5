#!/usr/bin/env python
#  -*- mode: python; indent-tabs-mode: nil; -*- coding: UTF8 -*-

"""

Collection.py

Copyright 2020-2021 by the r2epub authors

Distributable under the GNU General Public License Version 3 or newer.

Merge several ReSpec documents into one EPUB.

Every chapter is converted on its own, concurrently. The finished
chapter archives are then copied into the book, each into its own
directory chapter_<n>/, under a common cover and navigation document.

"""

import asyncio

from lxml import etree

from libgutenberg.Logger import debug, info

from r2epub.Config import get_book_configuration
from r2epub.Converter import RespecToEPUB
from r2epub.CSSResolver import BASE_CSS
from r2epub.Fetcher import Fetcher
from r2epub.ResourceCollector import W3C_LOGO
from r2epub.writers import CoverWriter, NavWriter, XHTMLWriter
from r2epub.writers.OCFWriter import OCF, CONTAINER, PACKAGE
from r2epub.writers.OPFWriter import Package

# These stay at the archive root, shared by all chapters.
SHARED_RESOURCES = (BASE_CSS, W3C_LOGO)

# Entries of a chapter archive that are not copied into the book.
SKIPPED_ENTRIES = ('mimetype', CONTAINER, PACKAGE, NavWriter.NAV, CoverWriter.COVER)

LINK_ATTRIBUTES = ('href', 'src', 'data')


class Chapter(object):
    """ One converted chapter. """

    def __init__(self, index, chapter_config):
        self.index = index
        self.chapter_config = chapter_config
        self.directory = 'chapter_%d/' % index
        self.id_prefix = 'chapter_%d_' % index
        self.context = None
        self.ocf = None


    async def initialize(self, converter):
        """ Run the single document conversion. """
        self.context, self.ocf = await converter.build(
            self.chapter_config.url, self.chapter_config.options)
        return self


    @property
    def title(self):
        return self.context.title


    @property
    def editors(self):
        return self.context.editors


    @property
    def date(self):
        return self.context.date


    @property
    def package(self):
        return self.context.package


class Book(object):
    """ The collection being built. """

    def __init__(self, config, chapters, identifier=None):
        self.config = config
        self.title = config.title
        self.name = config.name
        self.chapters = chapters

        self.editors = []
        for chapter in chapters:
            for editor in chapter.editors:
                if editor not in self.editors:
                    self.editors.append(editor)
        self.date = max(chapter.date for chapter in chapters)

        self.package = Package(identifier or 'urn:r2epub:%s' % self.name, self.title)
        self.ocf = OCF('%s.epub' % self.name)
        self.shared = set()
        self.entries = []   # (name, content) in archive order


def relink_shared(content, shared):
    """ Make links to shared resources in a chapter document point one level up. """

    root = etree.fromstring(content)
    changed = False
    for elem in root.iter(etree.Element):
        for attr in LINK_ATTRIBUTES:
            if elem.get(attr) in shared:
                elem.set(attr, '../' + elem.get(attr))
                changed = True
    if not changed:
        return content
    return XHTMLWriter.serialize(root)


def store_chapter(book, chapter):
    """ Copy the manifest items, the archive entries and the spine of a chapter. """

    entries = dict(chapter.ocf.read_entries())
    ids = {}
    shared = [href for href in SHARED_RESOURCES if href in chapter.package.hrefs]

    for item in chapter.package.manifest:
        href = item.get('href')
        if href in SKIPPED_ENTRIES:
            continue
        if href in SHARED_RESOURCES:
            if href not in book.shared:
                debug('%s contributes shared %s' % (chapter.directory, href))
                book.shared.add(href)
                book.package.manifest_item(href, item.get('media-type'))
                book.entries.append((href, entries[href]))
            continue

        ids[item.get('id')] = book.package.manifest_item(
            chapter.directory + href, item.get('media-type'),
            chapter.id_prefix + item.get('id'), item.get('properties'))
        content = entries[href]
        if href == XHTMLWriter.MAIN and shared:
            content = relink_shared(content, shared)
        book.entries.append((chapter.directory + href, content))

    for idref in chapter.package.spine_idrefs():
        if idref != CoverWriter.COVER_ID:
            book.package.spine_item(ids[idref])


async def generate_book(config, fetcher=None, identifier=None):
    """ Convert all chapters of config and merge them. Returns the container. """

    converter = RespecToEPUB(fetcher or Fetcher())
    tasks = [asyncio.ensure_future(Chapter(index, chapter_config).initialize(converter))
             for index, chapter_config in enumerate(config.chapters, 1)]
    try:
        chapters = await asyncio.gather(*tasks)
    except Exception:
        # one chapter failed, stop the others
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise

    book = Book(config, chapters, identifier)
    info('Merging %d chapters into %s' % (len(chapters), book.ocf.name))

    book.package.add_creators(book.editors)
    book.package.add_dates(book.date)

    cover = CoverWriter.create_cover(book.title, book.editors, book.date,
                                     subtitle=config.comment)
    nav = NavWriter.create_collection_nav(
        book.title,
        [(chapter.directory, chapter.title, chapter.ocf.get_entry(NavWriter.NAV))
         for chapter in chapters])

    book.package.add_manifest_item(cover)
    book.package.add_manifest_item(nav)
    book.package.spine_item(cover.id)
    book.package.spine_item(nav.id)

    for chapter in chapters:
        store_chapter(book, chapter)

    book.ocf.append(book.package.serialize(), PACKAGE)
    book.ocf.append(nav.text_content, nav.relative_url)
    book.ocf.append(cover.text_content, cover.relative_url)
    for name, content in book.entries:
        book.ocf.append(content, name)
    book.ocf.finalize()
    return book.ocf


async def create_epub(config_url, fetcher=None):
    """ Create a collection out of the json configuration at config_url. """

    fetcher = fetcher or Fetcher()
    data = await fetcher.fetch_json(config_url)
    config = get_book_configuration(data)
    return await generate_book(config, fetcher, config_url)
