#!/usr/bin/env python
#  -*- mode: python; indent-tabs-mode: nil; -*- coding: UTF8 -*-

"""

CSSResolver.py

Copyright 2020-2021 by the r2epub authors

Distributable under the GNU General Public License Version 3 or newer.

Style W3C documents for reading systems.

A W3C document links to a status dependent stylesheet on www.w3.org.
That link is replaced by a local copy of the base stylesheet plus a
generated epub.css that puts the right logo (and maybe a watermark) in
place. The logo and the watermark go into the container too.

"""

import urllib.parse

from lxml import etree

from libgutenberg.GutenbergGlobals import NS, xpath
from libgutenberg.Logger import debug, warning
from libgutenberg.MediaTypes import mediatypes as mt

from r2epub.CommonCode import UnknownSpecStatus
from r2epub.ResourceCollector import ResourceRef
from r2epub.parsers import CSSParser

PUBLISHER_HOST = 'www.w3.org'

STYLESHEETS = 'StyleSheets/TR/2016/'
BASE_CSS = STYLESHEETS + 'base.css'
EPUB_CSS = STYLESHEETS + 'epub.css'
LOGOS = STYLESHEETS + 'logos/'
WATERMARK = LOGOS + 'UD-watermark.png'

W3C_URL = 'https://www.w3.org/'

LOGO_PLACEHOLDER = '%%%LOGO%%%'


EXTRA_CSS = """
body {
    padding: 0 !important;
}

h2 {
    page-break-before: always;
    page-break-inside: avoid;
    page-break-after: avoid;
}

div.head h2 {
    page-break-before: auto;
    page-break-inside: avoid;
    page-break-after: avoid;
}

figure {
    page-break-inside: avoid;
}

h3, h4, h5 {
    page-break-after: avoid;
}

dl dt {
    page-break-after: avoid;
}

dl dd {
    page-break-before: avoid;
}

div.example, div.note, pre.idl, .warning, table.parameters, table.exceptions {
    page-break-inside: avoid;
}

p {
    orphans: 4;
    widows: 2;
}

#toc-nav, #toc-toggle-inline {
    display: none;
}

#back-to-top, .toc-toggle {
    display: none;
}

.figure, figure {
    margin-left: auto;
    margin-right: auto;
}

nav#toc {
    display: none;
}
"""

BACKGROUND_TEMPLATE = """
body {
    background-image: url('logos/%%%LOGO%%%');
}
""" + EXTRA_CSS

UNDEFINED_TEMPLATE = """
body {
    background-image: url('logos/%%%LOGO%%%');
    background-color: transparent;
}

html {
    background: white url('logos/UD-watermark.png');
}
""" + EXTRA_CSS

BG_TEMPLATE = """
@media screen and (min-width: 28em) {
    body {
        background-image: url('logos/%%%LOGO%%%');
        background-size: auto !important;
        padding-left: 150px;
    }
}

@media screen and (min-width: 78em) {
    body:not(.toc-inline) #toc {
        padding-top: 150px;
        background-attachment: local !important;
    }
}

@media screen {
    body.toc-sidebar #toc {
        padding-top: 150px;
        background-attachment: local !important;
    }
}
""" + EXTRA_CSS

CG_TEMPLATE = """
body {
    background-image: url('logos/%%%LOGO%%%');
    background-size: auto !important;
}

@media screen and (min-width: 28em) {
    body {
        padding-left: 160px;
    }
}

@media screen and (min-width: 78em) {
    body:not(.toc-inline) #toc {
        padding-top: 160px;
        background-attachment: local !important;
    }
}

@media screen {
    body.toc-sidebar #toc {
        padding-top: 160px;
        background-attachment: local !important;
    }
}
"""

CG_DRAFT_TEMPLATE = CG_TEMPLATE + """
body {
    background-color: transparent;
}

html {
    background: white url('logos/UD-watermark.png');
    background-repeat: repeat-x;
}
""" + EXTRA_CSS

CG_FINAL_TEMPLATE = CG_TEMPLATE + EXTRA_CSS


class StatusStyle(object):
    """ How a specStatus is styled. """

    def __init__(self, logo_name, watermark=False, logo_media_type=mt.svg,
                 template=BACKGROUND_TEMPLATE):
        self.logo_name = logo_name
        self.watermark = watermark
        self.logo_media_type = logo_media_type
        self.template = template


# statuses with a regular structure: no watermark, the logo is <STATUS>.svg
SIMPLE_SPEC_STATUS = ('ED', 'WD', 'CR', 'PR', 'PER', 'REC', 'RSCND', 'OBSL', 'SPSD')

SPEC_STATUS_CSS = {
    'UNOFFICIAL': StatusStyle('UD.png', watermark=True, logo_media_type=mt.png,
                              template=UNDEFINED_TEMPLATE),
    'FPWD':       StatusStyle('WD.svg'),
    'LC':         StatusStyle('WD.svg'),
    'FPWD-NOTE':  StatusStyle('WG-Note.svg'),
    'WG-NOTE':    StatusStyle('WG-Note.svg'),
    'BG-DRAFT':   StatusStyle('back-bg-draft.png', logo_media_type=mt.png,
                              template=BG_TEMPLATE),
    'BG-FINAL':   StatusStyle('back-bg-final.png', logo_media_type=mt.png,
                              template=BG_TEMPLATE),
    'CG-DRAFT':   StatusStyle('back-cg-draft.png', watermark=True, logo_media_type=mt.png,
                              template=CG_DRAFT_TEMPLATE),
    'CG-FINAL':   StatusStyle('back-cg-final.png', logo_media_type=mt.png,
                              template=CG_FINAL_TEMPLATE),
}


def get_status_style(spec_status):
    """ Look up the style of a specStatus. Raises UnknownSpecStatus. """

    status = (spec_status or '').strip().upper()
    if status in SPEC_STATUS_CSS:
        return SPEC_STATUS_CSS[status]
    if status in SIMPLE_SPEC_STATUS:
        return StatusStyle('%s.svg' % status)
    raise UnknownSpecStatus('Unknown specStatus: %s' % spec_status)


def make_epub_css(style):
    """ Fill in the logo and run the template through the css parser. """

    parser = CSSParser.Parser()
    parser.parse_string(style.template)
    parser.rewrite_links(lambda url: url.replace(LOGO_PLACEHOLDER, style.logo_name))
    return parser.serialize()


def find_publisher_link(xhtml):
    """ Return the stylesheet <link> pointing to www.w3.org, or None. """

    for link in xpath(
            xhtml,
            "//xhtml:link[contains(concat(' ', normalize-space(@rel), ' '), ' stylesheet ')]"
            "[@href]"):
        if urllib.parse.urlsplit(link.get('href').strip()).hostname == PUBLISHER_HOST:
            return link
    return None


def resolve_css(xhtml, config):
    """ Rewrite the W3C stylesheet link and return the extra resources.

    The document is changed in place. Unknown specStatus values are not
    an error: the document is then styled with the base stylesheet only.

    """

    link = find_publisher_link(xhtml)
    if link is None:
        debug('No W3C stylesheet in document')
        return []

    resources = [ResourceRef(BASE_CSS, mt.css, absolute_url=W3C_URL + BASE_CSS)]
    link.set('href', BASE_CSS)

    try:
        style = get_status_style(config.spec_status)
    except UnknownSpecStatus as what:
        warning('%s, using the base stylesheet only' % what)
        return resources

    logo = LOGOS + style.logo_name
    resources.append(ResourceRef(logo, style.logo_media_type, absolute_url=W3C_URL + logo))
    if style.watermark:
        resources.append(ResourceRef(WATERMARK, mt.png, absolute_url=W3C_URL + WATERMARK))
    resources.append(ResourceRef(EPUB_CSS, mt.css, text_content=make_epub_css(style)))

    new_link = etree.Element(str(NS.xhtml.link), rel="stylesheet", href=EPUB_CSS)
    link.addnext(new_link)

    return resources
