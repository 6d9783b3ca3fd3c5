#!/usr/bin/env python
#  -*- mode: python; indent-tabs-mode: nil; -*- coding: UTF8 -*-

"""

CoverWriter.py

Copyright 2020-2021 by the r2epub authors

Distributable under the GNU General Public License Version 3 or newer.

Builds the cover page (cover.xhtml).

"""

from libgutenberg.GutenbergGlobals import NS
from libgutenberg.MediaTypes import mediatypes as mt

from r2epub.ResourceCollector import ResourceRef
from r2epub import writers
from r2epub.writers import EPUB_TYPE, LANGUAGE

COVER = 'cover.xhtml'
COVER_ID = 'start'

PUBLISHER = 'World Wide Web Consortium'

COVER_CSS = """
body { margin: 2em; font-family: sans-serif; }
section.cover { text-align: center; }
h1.title { font-size: 2em; margin-top: 3em; margin-bottom: 1.5em; }
p.editors-label { font-weight: bold; margin-bottom: 0.2em; }
ul.editors { list-style: none; padding: 0; margin-top: 0; }
p.date { margin-top: 2em; }
p.publisher { margin-top: 4em; font-variant: small-caps; color: #005a9c; }
"""


def create_cover(title, editors, date, subtitle=None):
    """ Build the cover page. Returns a ResourceRef. """

    em = writers.xhtml_maker()

    section = em.section({'class': 'cover'}, em.h1(title, {'class': 'title'}))
    if subtitle:
        section.append(em.p(subtitle, {'class': 'subtitle'}))
    if editors:
        section.append(em.p('Editors:' if len(editors) > 1 else 'Editor:',
                            {'class': 'editors-label'}))
        section.append(em.ul({'class': 'editors'}, *[em.li(editor) for editor in editors]))
    if date:
        section.append(em.p(em.time(date, datetime=date), {'class': 'date'}))
    section.append(em.p(PUBLISHER, {'class': 'publisher'}))

    html = em.html(
        writers.xhtml_head(em, title, em.style(COVER_CSS)),
        em.body(section, **{EPUB_TYPE: 'cover'}),
        **{NS.xml.lang: LANGUAGE, 'lang': LANGUAGE})

    return ResourceRef(COVER, mt.xhtml, text_content=writers.serialize(html), id_=COVER_ID)
