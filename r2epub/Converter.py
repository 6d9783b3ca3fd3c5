#!/usr/bin/env python
#  -*- mode: python; indent-tabs-mode: nil; -*- coding: UTF8 -*-

"""

Converter.py

Copyright 2020-2021 by the r2epub authors

Distributable under the GNU General Public License Version 3 or newer.

Convert one ReSpec document into an EPUB.

The steps are:

 1. get the document and the ReSpec configuration embedded in it,
 2. start the package with identifier, title, editors and dates,
 3. collect the local resources the document refers to,
 4. point the W3C logo into the container,
 5. replace the W3C stylesheet by local copies (see CSSResolver),
 6. build the cover page and the navigation document,
 7. serialize the document and finish the package,
 8. fetch all resources into the container.

"""

from libgutenberg.Logger import debug, info

from r2epub.Config import ConversionOptions
from r2epub.Fetcher import Fetcher, check_web_url
from r2epub.ResourceCollector import collect_resources, merge_resources, set_w3c_logo
from r2epub.CSSResolver import resolve_css
from r2epub.parsers import HTMLParser
from r2epub.writers import CoverWriter, NavWriter, XHTMLWriter
from r2epub.writers.OCFWriter import OCF, PACKAGE
from r2epub.writers.OPFWriter import Package

TR_URL = 'https://www.w3.org/TR/%s/'


class DocumentContext(object):
    """ Hold the state of one document conversion.

    The context belongs to one conversion run and is handed to every
    step of it.

    """

    def __init__(self, document_url, xhtml, config):
        self.document_url = document_url
        self.xhtml = xhtml
        self.config = config
        self.title = HTMLParser.get_title(xhtml, config)
        self.date = HTMLParser.get_date(xhtml, config)
        self.identifier = TR_URL % config.short_name
        self.package = Package(self.identifier, self.title)
        self.resources = []


    @property
    def editors(self):
        return self.config.creators


    @property
    def epub_name(self):
        return '%s.epub' % self.config.short_name


    def __str__(self):
        l = []
        for k in ('document_url', 'title', 'date', 'identifier'):
            l.append("%s: %s" % (k, getattr(self, k)))
        return '\n'.join(l)


class RespecToEPUB(object):
    """ Converts a single ReSpec document. """

    def __init__(self, fetcher=None):
        self.fetcher = fetcher or Fetcher()


    async def get_context(self, url, options=None):
        """ Get the document and its configuration. """

        options = options or ConversionOptions()
        check_web_url(url)
        info('Converting %s' % url)
        xhtml = await self.fetcher.fetch_document(url, options.respec, options.config)
        config = HTMLParser.get_respec_config(xhtml)
        return DocumentContext(url, xhtml, config)


    async def process(self, context):
        """ Run the conversion steps on context, up to a complete package. """

        xhtml = context.xhtml
        package = context.package

        package.add_creators(context.editors)
        package.add_dates(context.date)

        resources = await collect_resources(xhtml, context.document_url, self.fetcher)
        logo = set_w3c_logo(xhtml)
        css = resolve_css(xhtml, context.config)

        cover = CoverWriter.create_cover(context.title, context.editors, context.date)
        nav = NavWriter.create_nav(xhtml, context.title, context.config.max_toc_level,
                                   main=XHTMLWriter.MAIN, cover=CoverWriter.COVER)
        main = XHTMLWriter.create_main(xhtml)

        context.resources = merge_resources([nav, cover, main], resources, logo, css)
        for resource in context.resources:
            package.add_manifest_item(resource)

        package.spine_item(CoverWriter.COVER_ID)
        package.spine_item(XHTMLWriter.MAIN_ID)
        debug(str(context))
        return context


    async def generate_epub(self, context):
        """ Put everything into the container and finalize it. """

        ocf = OCF(context.epub_name)
        ocf.append(context.package.serialize(), PACKAGE)
        await ocf.add_resources(context.resources, self.fetcher)
        ocf.finalize()
        return ocf


    async def build(self, url, options=None):
        """ Convert url. Return the document context and the container. """

        context = await self.get_context(url, options)
        await self.process(context)
        ocf = await self.generate_epub(context)
        return context, ocf


    async def create_epub(self, url, options=None):
        """ Convert url. Return the container. """

        dummy_context, ocf = await self.build(url, options)
        return ocf
