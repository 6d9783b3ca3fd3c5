#!/usr/bin/env python
#  -*- mode: python; indent-tabs-mode: nil; -*- coding: UTF8 -*-

"""

__init__.py

Copyright 2020-2021 by the r2epub authors

Distributable under the GNU General Public License Version 3 or newer.

Convert W3C ReSpec documents, or collections of them, into EPUB 3.

  ocf = await r2epub.convert('https://www.w3.org/TR/epub-33/')
  content = await ocf.get_content()

"""

from libgutenberg.Logger import debug

from r2epub import Collection
from r2epub.Converter import RespecToEPUB
from r2epub.Fetcher import Fetcher, JSON_MEDIATYPES, check_web_url


async def convert(url, options=None, fetcher=None):
    """ Convert url into an EPUB container.

    A json document at url is taken as a collection configuration,
    anything else as a single ReSpec document. options
    (a ConversionOptions) only apply to single documents.

    """

    check_web_url(url)
    fetcher = fetcher or Fetcher()
    media_type = await fetcher.fetch_media_type(url)
    debug('%s is %s' % (url, media_type))
    if media_type in JSON_MEDIATYPES:
        return await Collection.create_epub(url, fetcher)
    return await RespecToEPUB(fetcher).create_epub(url, options)
