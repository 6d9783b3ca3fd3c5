#!/usr/bin/env python
#  -*- mode: python; indent-tabs-mode: nil; -*- coding: UTF8 -*-

"""

Writer package

Copyright 2020-2021 by the r2epub authors

Distributable under the GNU General Public License Version 3 or newer.

Helpers shared by the *Writer modules.

"""

from lxml import etree
from lxml.builder import ElementMaker

import libgutenberg.GutenbergGlobals as gg
from libgutenberg.GutenbergGlobals import NS

from r2epub.Version import VERSION, GENERATOR

EPUB_TYPE = '{%s}type' % NS.epub

LANGUAGE = 'en-us'


def xhtml_maker():
    """ An ElementMaker for xhtml with the epub namespace declared. """
    return ElementMaker(namespace=str(NS.xhtml),
                        nsmap={None: str(NS.xhtml), 'epub': str(NS.epub)})


def xhtml_head(em, title, *children):
    """ A <head> with title, charset and generator. """
    return em.head(
        em.meta(charset='utf-8'),
        em.title(title),
        em.meta(name='generator', content=GENERATOR % VERSION),
        *children)


def serialize(html, pretty_print=True):
    """ Serialize an xhtml tree as unicode with xml declaration and doctype. """

    # Ugly workaround for error: "Serialisation to unicode must not
    # request an XML declaration"
    return "%s\n%s" % (gg.XML_DECLARATION,
                       etree.tostring(html,
                                      doctype=gg.HTML5_DOCTYPE,
                                      encoding=str,
                                      pretty_print=pretty_print))
