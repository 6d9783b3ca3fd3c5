#!/usr/bin/env python
#  -*- mode: python; indent-tabs-mode: nil; -*- coding: UTF8 -*-

"""

HTMLParser.py

Copyright 2020-2021 by the r2epub authors

Distributable under the GNU General Public License Version 3 or newer.

Parse a ReSpec generated html document into an xhtml tree and read
the metadata ReSpec leaves in it.

"""

import datetime
import json
import re

import lxml.html
from lxml import etree
from bs4 import BeautifulSoup, CData, Comment

import libgutenberg.GutenbergGlobals as gg
from libgutenberg.GutenbergGlobals import NS, xpath
from libgutenberg.Logger import debug, error, warning

from r2epub.CommonCode import MissingDocumentConfig, R2EpubError
from r2epub.Config import RespecConfig
from r2epub.parsers import RE_RESTRICTED, RE_XML_NAME, NS_MATHML, NS_SVG, NS_XLINK

# attribute prefixes the xml parser knows about
KNOWN_PREFIXES = ('xml', 'xmlns', 'xlink')

RE_DATE = re.compile(r'^(\d{4}-\d{2}-\d{2})')


def _clean_soup(soup):
    """ Make the soup serialize into well-formed xml. """

    for comment in soup.find_all(string=lambda s: isinstance(s, Comment)):
        comment.extract()

    uses_xlink = False
    for tag in soup.find_all(True):
        for name in list(tag.attrs):
            prefix = name.split(':')[0] if ':' in name else None
            if not RE_XML_NAME.match(name) or (prefix and prefix not in KNOWN_PREFIXES):
                debug('Dropping attribute %s on <%s>' % (name, tag.name))
                del tag[name]
            elif prefix == 'xlink':
                uses_xlink = True

        if tag.name == 'svg' and 'xmlns' not in tag.attrs:
            tag['xmlns'] = NS_SVG
        elif tag.name == 'math' and 'xmlns' not in tag.attrs:
            tag['xmlns'] = NS_MATHML

        if tag.name in ('script', 'style') and tag.string:
            text = tag.string
            if '<' in text or '&' in text:
                tag.string.replace_with(CData(text))

    soup.html['xmlns'] = str(NS.xhtml)
    if uses_xlink:
        soup.html['xmlns:xlink'] = NS_XLINK


def parse_document(text, url):
    """ Parse html text into an xhtml tree.

    The html5 parser does the error recovery, the result is then read
    back with lxml's xhtml parser, so every element ends up in the
    xhtml namespace (or in svg or mathml).

    """

    soup = BeautifulSoup(text, 'html5lib')
    if soup.html is None or soup.html.body is None:
        error('%s is not a usable html file' % url)
        raise R2EpubError('"%s": not a usable html file' % url)

    _clean_soup(soup)
    html = RE_RESTRICTED.sub('', str(soup))

    try:
        return etree.fromstring(
            html,
            lxml.html.XHTMLParser(huge_tree=True),
            base_url=url)
    except etree.ParseError as what:
        error("Failed to parse %s because: %s" % (url, what))
        raise R2EpubError('"%s": failed parsing (%s)' % (url, what))


def get_respec_config(xhtml):
    """ Get the ReSpec user configuration out of the document.

    ReSpec stores it as json in <script id="initialUserConfig">.

    """

    for script in xpath(xhtml, "//xhtml:script[@id = 'initialUserConfig']"):
        try:
            data = json.loads(script.text or '')
        except ValueError as what:
            raise MissingDocumentConfig('User config is not valid json: %s' % what)
        return RespecConfig.from_dict(data)

    raise MissingDocumentConfig('User config is not available')


def get_title(xhtml, config=None):
    """ Get the document title. """

    for title in xpath(xhtml, "//xhtml:head/xhtml:title"):
        text = gg.normalize(etree.tostring(title, method='text', encoding=str,
                                           with_tail=False)).strip()
        if text:
            return text
    if config is not None:
        warning('Document has no title, using its short name')
        return config.short_name
    return ''


def get_date(xhtml, config=None):
    """ Get the publication date as YYYY-MM-DD. """

    for datetime_ in xpath(
            xhtml,
            "//xhtml:time[contains(concat(' ', normalize-space(@class), ' '),"
            " ' dt-published ')]/@datetime"):
        match = RE_DATE.match(datetime_.strip())
        if match:
            return match.group(1)

    if config is not None and config.publish_date:
        match = RE_DATE.match(config.publish_date)
        if match:
            return match.group(1)

    today = datetime.date.today().isoformat()
    warning('Document has no publication date, using %s' % today)
    return today
