#!/usr/bin/env python
#  -*- mode: python; indent-tabs-mode: nil; -*- coding: UTF8 -*-

"""

Parser Package

Copyright 2020-2021 by the r2epub authors

Distributable under the GNU General Public License Version 3 or newer.

"""

import re

from cherrypy.lib import httputil
from lxml import etree

import libgutenberg.GutenbergGlobals as gg

HeaderElement = httputil.HeaderElement

# XML 1.1 RestrictedChars
# [#x1-#x8] | [#xB-#xC] | [#xE-#x1F] | [#x7F-#x84] | [#x86-#x9F]
RE_RESTRICTED = re.compile('[\x01-\x08\x0b\x0c\x0e-\x1f\x7f-\x84\x86-\x9f]')

XML_NAMESTARTCHAR = ':A-Z_a-z\u00c0-\u00d6\u00d8-\u00f6\u00f8-\u02ff' \
                    '\u0370-\u037d\u037f-\u1fff\u200c-\u200d\u2070-\u218f' \
                    '\u2c00-\u2fef\u3001-\ud7ff\uf900-\ufdcf\ufdf0-\ufffd'
                    # u'\U00010000-\U000effff'
XML_NAMECHAR = '-.0-9\u00b7\u0300-\u036f\u203f-\u2040' + XML_NAMESTARTCHAR

RE_XML_NAME = re.compile('^[%s][%s]*$' % (XML_NAMESTARTCHAR, XML_NAMECHAR))

NS_SVG = 'http://www.w3.org/2000/svg'
NS_MATHML = 'http://www.w3.org/1998/Math/MathML'
NS_XLINK = 'http://www.w3.org/1999/xlink'


def get_header_text(header):
    """ Clean header text. """
    text = gg.normalize(etree.tostring(header,
                                       method="text",
                                       encoding=str,
                                       with_tail=False))
    return header.get('title', text).strip()
