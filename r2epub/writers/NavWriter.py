#!/usr/bin/env python
#  -*- mode: python; indent-tabs-mode: nil; -*- coding: UTF8 -*-

"""

NavWriter.py

Copyright 2020-2021 by the r2epub authors

Distributable under the GNU General Public License Version 3 or newer.

Builds the EPUB3 navigation document (nav.xhtml).

"""

import copy
import urllib.parse

from lxml import etree

from libgutenberg.GutenbergGlobals import NS, xpath
from libgutenberg.Logger import debug, warning
from libgutenberg.MediaTypes import mediatypes as mt

from r2epub.CommonCode import Options
from r2epub.ResourceCollector import ResourceRef
from r2epub.parsers import get_header_text
from r2epub import writers
from r2epub.writers import EPUB_TYPE, LANGUAGE

options = Options()

NAV = 'nav.xhtml'
NAV_ID = 'nav'

HEADERS = ('h2', 'h3', 'h4', 'h5', 'h6')


class OutlineFixer(object):
    """ Class that fixes outline levels. """

    def __init__(self):
        self.stack = [(0, 1),]
        self.last = 1

    def level(self, in_level):
        if in_level < 1:
            return in_level
        (promotion, from_level) = self.stack[-1]
        if in_level > self.last + 1:
            # needs promotion
            more_promotion = in_level - self.last - 1
            new_promotion = promotion + more_promotion
            self.last = in_level
            self.stack.append((new_promotion, in_level))
            return in_level - new_promotion

        if in_level < from_level:
            # close out promotion
            self.last = from_level - promotion - 1
            self.stack.pop()
            return self.level(in_level)

        self.last = in_level
        return in_level - promotion


def make_toc(xhtml, url, max_toc_level=None):
    """ Build a TOC from the section headers of a ReSpec document.

    Return a list of [url, text, depth]. Headers without an id get one.
    The title block (div.head) and the document's own toc are skipped.

    """

    existing_ids = set(xpath(xhtml, '//@id'))

    def id_generator(i=0):
        """ Generate an id for the TOC to link to. """
        while True:
            id_ = 'r2epubid%05d' % i
            i += 1
            if id_ not in existing_ids:
                yield id_

    idg = id_generator()

    def get_id(elem):
        """ Get the id of the element or generate and set one. """
        if not elem.get('id'):
            elem.set('id', next(idg))
        return elem.get('id')

    query = '|'.join('//xhtml:body//xhtml:%s' % h for h in HEADERS)
    toc = []

    for header in xpath(xhtml, query):
        if xpath(header, "ancestor::xhtml:nav|ancestor::xhtml:div"
                         "[contains(concat(' ', normalize-space(@class), ' '), ' head ')]"):
            continue

        text = get_header_text(header)
        if not text:
            # so <h2 title=""> may be used to suppress TOC entry
            continue

        depth = int(header.tag[-1:]) - 1
        if max_toc_level and depth > max_toc_level:
            continue

        target = header
        if not header.get('id'):
            # if <h*> is first element of a <section> use the <section>
            parent = header.getparent()
            if (parent is not None and parent.tag == NS.xhtml.section and
                    parent.get('id') and parent[0] == header):
                target = parent

        toc.append(['%s#%s' % (url, get_id(target)), text, depth])

    return toc


class Toc(object):
    """ Class that builds nav.xhtml. """

    def __init__(self, title):
        self.toc = []
        self.landmarks = []
        self.title = title
        self.elementmaker = writers.xhtml_maker()


    def __str__(self):
        return self.serialize()


    def normalize_toc(self):
        """ Normalize toc so that it starts at depth 1 and doesn't jump down more than one """
        # level at a time
        fixer = OutlineFixer()
        top_level = 10
        for t in self.toc:
            t[2] = fixer.level(t[2])
            if t[2] > 0:
                top_level = min(t[2], top_level)
        if top_level != 1:
            for t in self.toc:
                t[2] = t[2] - top_level + 1


    def add_landmark(self, url, title, type_):
        self.landmarks.append((url, title, type_))


    def _make_navmap(self, toc):
        """ Build the toc. """
        em = self.elementmaker

        root = em.nav(**{EPUB_TYPE: 'toc', 'id': 'toc',
                         'role': 'doc-toc', 'aria-label': 'Table of Contents'})
        root.append(em.h2('Table of Contents'))
        toctop = em.ol()
        root.append(toctop)

        count = 0
        prev_depth = 1
        current_ol = toctop
        for url, title, depth in toc:
            if depth < 0:
                continue
            count += 1
            toc_item = em.a(title, **{'href': url, 'id': "np-%d" % count})
            if depth > prev_depth:
                while depth > prev_depth:
                    for el in reversed(current_ol):
                        li = el
                        break
                    else:
                        li = em.li()
                        current_ol.append(li)
                    new_ol = em.ol()
                    li.append(new_ol)
                    prev_depth += 1
                    current_ol = new_ol
            else:
                while depth < prev_depth:
                    current_ol = current_ol.getparent().getparent()
                    prev_depth -= 1
            li = em.li(toc_item)
            current_ol.append(li)

        return root


    def _make_landmarks(self):
        """ Build the landmarks. """
        em = self.elementmaker
        root = em.nav(**{EPUB_TYPE: 'landmarks', 'id': 'landmarks',
                         'aria-label': 'Landmarks', 'hidden': 'hidden'})
        top = em.ol()
        root.append(top)
        for url, title, type_ in self.landmarks:
            top.append(em.li(em.a(title, **{'href': url, EPUB_TYPE: type_})))
        return root


    def make_body(self):
        """ Build the <body>. Override for other kinds of toc. """
        em = self.elementmaker
        if self.toc:
            self.normalize_toc()
        return em.body(self._make_navmap(self.toc))


    def serialize(self):
        """ Serialize nav.xhtml as unicode string. """
        em = self.elementmaker

        body = self.make_body()
        if self.landmarks:
            body.append(self._make_landmarks())

        html = em.html(
            writers.xhtml_head(em, self.title),
            body,
            **{NS.xml.lang: LANGUAGE, 'lang': LANGUAGE})

        nav = writers.serialize(html)
        if (getattr(options, 'verbose', 0) or 0) >= 3:
            debug(nav)
        return nav


    def resource(self):
        """ Return nav.xhtml as ResourceRef. """
        return ResourceRef(NAV, mt.xhtml, text_content=self.serialize(),
                           id_=NAV_ID, properties='nav')


def create_nav(xhtml, title, max_toc_level=None, main='Overview.xhtml', cover='cover.xhtml'):
    """ Build the nav document of a single document. """

    toc = Toc(title)
    toc.toc = make_toc(xhtml, main, max_toc_level)
    if not toc.toc:
        # the toc <ol> must not be empty
        toc.toc = [[main, title, 1]]
    debug('Navigation document with %d entries' % len(toc.toc))
    toc.add_landmark(cover, 'Cover', 'cover')
    toc.add_landmark(main, 'Start of content', 'bodymatter')
    return toc.resource()


class CollectionToc(Toc):
    """ Builds nav.xhtml for a collection out of the chapters' own nav documents. """

    def __init__(self, title):
        Toc.__init__(self, title)
        self.chapters = []


    def add_chapter(self, directory, title, nav_xhtml):
        """ Add a chapter.

        directory is the chapter's directory in the container, with the
        trailing slash; nav_xhtml is the chapter's nav.xhtml as bytes.

        """

        html = etree.fromstring(nav_xhtml)
        ols = xpath(html, "//xhtml:nav[@id = 'toc']/xhtml:ol")
        ol = copy.deepcopy(ols[0]) if ols else None
        if ol is None:
            warning('Chapter %s has no table of contents' % directory)
        else:
            prefix = directory.strip('/').replace('/', '_') + '_'
            for a in xpath(ol, './/xhtml:a[@href]'):
                href = a.get('href')
                if not urllib.parse.urlsplit(href).scheme:
                    a.set('href', directory + href)
            for elem in xpath(ol, 'descendant-or-self::*[@id]'):
                elem.set('id', prefix + elem.get('id'))
        self.chapters.append((directory, title, ol))


    def make_body(self):
        em = self.elementmaker

        root = em.nav(**{EPUB_TYPE: 'toc', 'id': 'toc',
                         'role': 'doc-toc', 'aria-label': 'Table of Contents'})
        root.append(em.h2('Table of Contents'))
        toctop = em.ol()
        root.append(toctop)

        for directory, title, ol in self.chapters:
            li = em.li(em.a(title, href=directory + 'Overview.xhtml'))
            if ol is not None:
                li.append(ol)
            toctop.append(li)

        return em.body(root)


def create_collection_nav(title, chapters):
    """ Build the nav document of a collection.

    chapters is a list of (directory, title, nav.xhtml bytes).

    """

    toc = CollectionToc(title)
    for directory, chapter_title, nav_xhtml in chapters:
        toc.add_chapter(directory, chapter_title, nav_xhtml)
    toc.add_landmark('cover.xhtml', 'Cover', 'cover')
    if chapters:
        toc.add_landmark(chapters[0][0] + 'Overview.xhtml', 'Start of content', 'bodymatter')
    return toc.resource()
