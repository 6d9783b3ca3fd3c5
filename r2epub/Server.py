#!/usr/bin/env python
#  -*- mode: python; indent-tabs-mode: nil; -*- coding: UTF8 -*-

"""

Server.py

Copyright 2020-2021 by the r2epub authors

Distributable under the GNU General Public License Version 3 or newer.

r2epub as a web service.

  GET /                        the home page
  GET /?url=...[&respec=true]  the EPUB

"""

import asyncio
import logging
import os
import sys

import cherrypy

from libgutenberg.Logger import error, info, warning
from libgutenberg import Logger

from r2epub import convert
from r2epub.CommonCode import (
    ContainerFinalizationFailure, InvalidSourceUrl, MissingDocumentConfig,
    R2EpubError, ResourceUnreachable, SchemaValidationFailure)
from r2epub.Config import ConversionOptions, get_respec_options
from r2epub.Fetcher import Fetcher

DEFAULT_PORT = 5000

SERVER_PLACEHOLDER = '%%%SERVER%%%'

HOMEPAGE = """<!doctype html>
<html>
<head>
    <meta charset='utf-8'>
    <title>Service to convert W3C Technical Reports to EPUB 3.2</title>
</head>

<body>
    <main>
        <h1>Service to convert W3C Technical Reports to EPUB 3.2</h1>

        <p>This service converts W3C Technical Reports, authored in
        <a href="https://github.com/w3c/respec/wiki/">ReSpec</a>, to EPUB 3.2.
        The query parameters are:</p>

        <dl>
            <dt><code>url</code></dt>
            <dd>The URL of either the (HTML) document <em>or</em> the (JSON)
            configuration of a collection of documents. In the second case all
            other parameters are ignored. <em>This value is required</em>.</dd>

            <dt><code>respec</code></dt>
            <dd>Whether the source has to be processed by ReSpec ("true") or is
            final HTML ("false"). In the former case the source is converted by
            the <a href="https://github.com/w3c/spec-generator">W3C Spec Generator</a>
            first.</dd>

            <dt><code>publishDate</code></dt>
            <dd>Publication date, overrides the ReSpec configuration.</dd>

            <dt><code>specStatus</code></dt>
            <dd>Specification status, overrides the ReSpec configuration.</dd>

            <dt><code>addSectionLinks</code></dt>
            <dd>Add section links, overrides the ReSpec configuration.</dd>

            <dt><code>maxTocLevel</code></dt>
            <dd>Maximum sectioning level of the table of contents, overrides the
            ReSpec configuration.</dd>
        </dl>

        <p>Setting any of <code>publishDate</code>, <code>specStatus</code>,
        <code>addSectionLinks</code> or <code>maxTocLevel</code> implies
        <code>respec=true</code>.</p>

        <h2>Usage examples</h2>

        <pre>%%%SERVER%%%?url=https://www.example.org/doc.html</pre>

        <pre>%%%SERVER%%%?url=https://www.example.org/doc.html&amp;respec=true</pre>

        <pre>%%%SERVER%%%?url=https://www.example.org/doc.html&amp;respec=true&amp;specStatus=REC</pre>

        <pre>%%%SERVER%%%?url=https://www.example.org/collection.json</pre>
    </main>
</body>
</html>
"""

# error class -> http status
ERROR_STATUS = (
    (InvalidSourceUrl, 400),
    (MissingDocumentConfig, 400),
    (SchemaValidationFailure, 400),
    (ResourceUnreachable, 502),
    (ContainerFinalizationFailure, 500),
)


def is_true(value):
    return (value or '').strip().lower() in ('true', 'yes', '1', 'on')


def home_page(server):
    return HOMEPAGE.replace(SERVER_PLACEHOLDER, server)


def query_options(respec=None, publishDate=None, specStatus=None,
                  addSectionLinks=None, maxTocLevel=None):
    """ Build the conversion options out of the query parameters. """

    respec_options = get_respec_options(publishDate=publishDate or None,
                                        specStatus=specStatus or None,
                                        addSectionLinks=addSectionLinks or None,
                                        maxTocLevel=maxTocLevel or None)
    return ConversionOptions(is_true(respec) or bool(respec_options), respec_options)


def http_status(what):
    """ Map a conversion error to a http status. """
    for class_, status in ERROR_STATUS:
        if isinstance(what, class_):
            return status
    return 500


class R2EpubService(object):
    """ The cherrypy application. """

    def __init__(self, fetcher=None):
        self.fetcher = fetcher


    @cherrypy.expose
    def index(self, url=None, respec=None, publishDate=None, specStatus=None,
              addSectionLinks=None, maxTocLevel=None, **dummy_kwargs):
        if not url:
            cherrypy.response.headers['Content-Type'] = 'text/html; charset=utf-8'
            return home_page(cherrypy.url('/'))

        try:
            options = query_options(respec, publishDate, specStatus,
                                    addSectionLinks, maxTocLevel)
            content, name = asyncio.run(self.convert(url, options))
        except R2EpubError as what:
            status = http_status(what)
            error('Conversion of %s failed: %s' % (url, what))
            raise cherrypy.HTTPError(status, str(what))

        info('Serving %s (%d bytes)' % (name, len(content)))
        cherrypy.response.headers['Content-Type'] = 'application/epub+zip'
        cherrypy.response.headers['Content-Disposition'] = 'attachment; filename="%s"' % name
        return content


    async def convert(self, url, options):
        ocf = await convert(url, options, self.fetcher or Fetcher())
        content = await ocf.get_content()
        return content, ocf.name


def main():
    """ Run the service. """

    Logger.setup(Logger.LOGFORMAT, loglevel=logging.INFO)

    try:
        port = int(os.environ.get('PORT', DEFAULT_PORT))
    except ValueError:
        warning('Invalid PORT, using %d' % DEFAULT_PORT)
        port = DEFAULT_PORT

    cherrypy.config.update({
        'server.socket_host': '0.0.0.0',
        'server.socket_port': port,
    })
    info('r2epub service on port %d' % port)
    cherrypy.quickstart(R2EpubService())
    return 0


if __name__ == "__main__":
    sys.exit(main())
