#!/usr/bin/env python
#  -*- mode: python; indent-tabs-mode: nil; -*- coding: UTF8 -*-

"""

ResourceCollector.py

Copyright 2020-2021 by the r2epub authors

Distributable under the GNU General Public License Version 3 or newer.

Find the resources a document refers to with relative urls.

Images, stylesheets, embedded objects and local hyperlink targets all
have to go into the EPUB container. Their bytes are not fetched here,
only their media type is looked up.

"""

import asyncio
import posixpath
import urllib.parse

from libgutenberg.GutenbergGlobals import xpath
from libgutenberg.Logger import debug, info, warning
from libgutenberg.MediaTypes import mediatypes as mt

# (xpath, attribute) of links pointing to resources
RESOURCE_REFERENCES = (
    ('//xhtml:img', 'src'),
    ('//xhtml:a', 'href'),
    ("//xhtml:link[contains(concat(' ', normalize-space(@rel), ' '), ' stylesheet ')]", 'href'),
    ('//xhtml:object', 'data'),
)

W3C_LOGO = 'StyleSheets/TR/2016/logos/W3C.svg'
W3C_LOGO_URL = 'https://www.w3.org/StyleSheets/TR/2016/logos/W3C'


class ResourceRef(object):
    """ A file destined for the EPUB container.

    Exactly one of absolute_url (the bytes still have to be fetched)
    and text_content (the content is already there) is set.

    """

    def __init__(self, relative_url, media_type, absolute_url=None, text_content=None,
                 id_=None, properties=None):
        if (absolute_url is None) == (text_content is None):
            raise ValueError(
                'Resource %s needs exactly one of absolute_url and text_content' % relative_url)
        if not relative_url:
            raise ValueError('Resource without a relative url')

        self.relative_url = relative_url
        self.media_type = media_type
        self.absolute_url = absolute_url
        self.text_content = text_content
        self.id = id_
        self.properties = properties


    def __repr__(self):
        return '<ResourceRef %s (%s) from %s>' % (
            self.relative_url, self.media_type,
            self.absolute_url if self.absolute_url is not None else 'text')


    def __eq__(self, other):
        if not isinstance(other, ResourceRef):
            return NotImplemented
        return self.__dict__ == other.__dict__


    def __hash__(self):
        return hash(self.relative_url)


def local_path(ref):
    """ Return the container path for a relative reference, or None.

    Empty, fragment only and absolute references are not local.
    Fragment and query are stripped.

    """

    ref = (ref or '').strip()
    if not ref:
        return None

    parsed = urllib.parse.urlsplit(ref)
    if parsed.scheme or parsed.netloc or not parsed.path:
        return None

    if parsed.path.startswith('/'):
        warning('Ignoring server relative reference %s' % ref)
        return None

    path = posixpath.normpath(parsed.path)
    if path == '..' or path.startswith('../'):
        warning('Ignoring reference outside of the document directory: %s' % ref)
        return None
    if path == '.':
        return None
    return path


def find_local_references(xhtml):
    """ Return the relative paths of all local resources.

    Images come first, then anchors, stylesheets and objects, each in
    document order.

    Does not change the document, so calling it twice gives the same
    result.

    """

    paths = []
    seen = set()
    for query, attr in RESOURCE_REFERENCES:
        for elem in xpath(xhtml, query):
            path = local_path(elem.get(attr))
            if path is not None and path not in seen:
                seen.add(path)
                paths.append(path)
    return paths


async def collect_resources(xhtml, document_url, fetcher):
    """ Return a ResourceRef for every local resource of the document.

    The media types are looked up concurrently. One failed lookup fails
    the lot.

    """

    paths = find_local_references(xhtml)
    absolute_urls = [urllib.parse.urljoin(document_url, path) for path in paths]
    debug('Looking up media types of %d resources' % len(absolute_urls))

    media_types = await asyncio.gather(
        *[fetcher.fetch_media_type(url) for url in absolute_urls])

    return [ResourceRef(path, media_type, absolute_url=url)
            for path, media_type, url in zip(paths, media_types, absolute_urls)]


def set_w3c_logo(xhtml):
    """ Point the W3C logo image into the container.

    Returns a list with the logo resource, or an empty list if the
    document has no W3C logo.

    """

    logos = xpath(xhtml, "//xhtml:img[@alt = 'W3C']")
    for img in logos:
        img.set('src', W3C_LOGO)
    if logos:
        return [ResourceRef(W3C_LOGO, mt.svg, absolute_url=W3C_LOGO_URL)]
    return []


def merge_resources(*resource_lists):
    """ Concatenate resource lists, dropping later copies of a path. """

    resources = []
    seen = {}
    for resource_list in resource_lists:
        for resource in resource_list:
            if resource.relative_url in seen:
                info('Dropping duplicate resource %s' % resource.relative_url)
                continue
            seen[resource.relative_url] = resource
            resources.append(resource)
    return resources
