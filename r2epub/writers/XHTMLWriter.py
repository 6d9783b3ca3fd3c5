#!/usr/bin/env python
#  -*- mode: python; indent-tabs-mode: nil; -*- coding: UTF8 -*-

"""

XHTMLWriter.py

Copyright 2020-2021 by the r2epub authors

Distributable under the GNU General Public License Version 3 or newer.

Serializes the converted document (Overview.xhtml).

"""

import copy
import re

from lxml import etree

from libgutenberg.GutenbergGlobals import NS
from libgutenberg.Logger import debug
from libgutenberg.MediaTypes import mediatypes as mt

from r2epub.ResourceCollector import ResourceRef
from r2epub.parsers import NS_MATHML, NS_SVG
from r2epub import writers

MAIN = 'Overview.xhtml'
MAIN_ID = 'main'

VOID_ELEMENTS = frozenset(
    str(getattr(NS.xhtml, tag)) for tag in (
        'area', 'base', 'br', 'col', 'embed', 'hr', 'img', 'input',
        'link', 'meta', 'param', 'source', 'track', 'wbr'))

SCRIPT_TYPES = ('', 'text/javascript', 'application/javascript', 'module',
                'text/ecmascript', 'application/ecmascript')

match_remote = re.compile(r'^https?://', re.I)

REMOTE_REFERENCES = (('img', 'src'), ('script', 'src'), ('audio', 'src'),
                     ('video', 'src'), ('source', 'src'), ('object', 'data'),
                     ('iframe', 'src'), ('link', 'href'))


def fix_empty_elements(xhtml):
    """ Make sure non-void xhtml elements get an end tag.

    <div/> is valid xml but a html parser reads it as an unclosed <div>.

    """

    for elem in xhtml.iter(etree.Element):
        if (elem.tag.startswith('{%s}' % NS.xhtml) and elem.tag not in VOID_ELEMENTS
                and elem.text is None and len(elem) == 0):
            elem.text = ''


def manifest_properties(xhtml):
    """ Return the manifest properties the content document needs. """

    props = []

    for script in xhtml.iter(str(NS.xhtml.script)):
        if script.get('type', '').strip().lower() in SCRIPT_TYPES:
            props.append('scripted')
            break

    for tag, attr in REMOTE_REFERENCES:
        if any(match_remote.match(elem.get(attr, ''))
               for elem in xhtml.iter(str(getattr(NS.xhtml, tag)))
               if tag != 'link' or 'stylesheet' in elem.get('rel', '').split()):
            props.append('remote-resources')
            break

    if next(xhtml.iter('{%s}svg' % NS_SVG), None) is not None:
        props.append('svg')
    if next(xhtml.iter('{%s}math' % NS_MATHML), None) is not None:
        props.append('mathml')

    return ' '.join(props) or None


def serialize(xhtml):
    """ Serialize the document as polyglot xhtml. Does not change xhtml. """

    xhtml = copy.deepcopy(xhtml)
    fix_empty_elements(xhtml)
    return writers.serialize(xhtml, pretty_print=False)


def create_main(xhtml):
    """ Return the converted document as ResourceRef. """

    properties = manifest_properties(xhtml)
    debug('%s properties: %s' % (MAIN, properties))
    return ResourceRef(MAIN, mt.xhtml, text_content=serialize(xhtml),
                       id_=MAIN_ID, properties=properties)
