#!/usr/bin/env python
#  -*- mode: python; indent-tabs-mode: nil; -*- coding: UTF8 -*-

"""

OCFWriter.py

Copyright 2020-2021 by the r2epub authors

Distributable under the GNU General Public License Version 3 or newer.

Writes the EPUB container (OCF) into memory.

"""

import asyncio
import io
import time
import zipfile

from lxml import etree
from lxml.builder import ElementMaker

from libgutenberg.Logger import debug, exception, info

from r2epub.CommonCode import ContainerFinalizationFailure

MIMETYPE = 'application/epub+zip'
PACKAGE = 'package.opf'
CONTAINER = 'META-INF/container.xml'


class OCF(object):
    """ Class representing an OCF Container.

    Entries are collected with append() and written out by finalize().
    finalize() puts the mimetype file first and uncompressed, then
    container.xml, then the entries in the order they were appended.

    A container can be finalized only once.

    """

    def __init__(self, name):
        self.name = name
        self.entries = []
        self.names = set()
        self.content = None


    def append(self, content, name):
        """ Append an entry from unicode or bytes. """

        if self.content is not None:
            raise ContainerFinalizationFailure(
                'Cannot add %s to finalized container %s' % (name, self.name))
        if name in self.names:
            raise ContainerFinalizationFailure(
                'Duplicate entry %s in container %s' % (name, self.name))
        if isinstance(content, str):
            content = content.encode('utf-8')
        self.entries.append((name, content))
        self.names.add(name)


    async def add_resources(self, resources, fetcher):
        """ Append ResourceRefs.

        Text content is appended right away. Everything else is fetched
        now, concurrently, and appended in the order of resources.

        """

        to_be_fetched = []
        for resource in resources:
            if resource.text_content is not None:
                self.append(resource.text_content, resource.relative_url)
            else:
                to_be_fetched.append(resource)

        debug('Fetching %d resources for %s' % (len(to_be_fetched), self.name))
        contents = await asyncio.gather(
            *[fetcher.fetch_bytes(resource.absolute_url) for resource in to_be_fetched])

        for resource, content in zip(to_be_fetched, contents):
            self.append(content, resource.relative_url)


    @staticmethod
    def zi(filename):
        """ Make a ZipInfo. """
        z = zipfile.ZipInfo()
        z.filename = filename
        z.date_time = time.gmtime()[:6]
        z.compress_type = zipfile.ZIP_DEFLATED
        z.external_attr = 0x81a40000
        return z


    @staticmethod
    def container_xml(rootfilename=PACKAGE):
        """ Return container.xml

        <?xml version='1.0' encoding='UTF-8'?>

        <container xmlns='urn:oasis:names:tc:opendocument:xmlns:container'
                   version='1.0'>
          <rootfiles>
            <rootfile full-path='$path'
                      media-type='application/oebps-package+xml' />
          </rootfiles>
        </container>

        """

        ns_oasis = 'urn:oasis:names:tc:opendocument:xmlns:container'

        ocf = ElementMaker(namespace=ns_oasis,
                           nsmap={None: ns_oasis})

        container = ocf.container(
            ocf.rootfiles(
                ocf.rootfile(**{
                    'full-path': rootfilename,
                    'media-type': 'application/oebps-package+xml'})),
            version='1.0')

        return etree.tostring(
            container, encoding='utf-8', xml_declaration=True, pretty_print=True)


    def finalize(self):
        """ Write the zip archive. """

        if self.content is not None:
            raise ContainerFinalizationFailure('Container %s already finalized' % self.name)

        buffer = io.BytesIO()
        try:
            with zipfile.ZipFile(buffer, 'w', zipfile.ZIP_DEFLATED) as zip_:
                # the OCF spec says mimetype must be first and uncompressed
                i = self.zi('mimetype')
                i.compress_type = zipfile.ZIP_STORED
                zip_.writestr(i, MIMETYPE)

                zip_.writestr(self.zi(CONTAINER), self.container_xml())

                for name, content in self.entries:
                    zip_.writestr(self.zi(name), content)
        except (zipfile.BadZipFile, OSError, ValueError) as what:
            exception('Error building Epub file %s' % self.name)
            raise ContainerFinalizationFailure('Cannot write %s: %s' % (self.name, what))

        self.content = buffer.getvalue()
        info('Done Epub file: %s (%d entries)' % (self.name, len(self.entries) + 2))
        return self.content


    async def get_content(self):
        """ Return the finalized container as bytes. """
        if self.content is None:
            raise ContainerFinalizationFailure('Container %s not finalized' % self.name)
        return self.content


    def read_entries(self):
        """ Yield (name, bytes) for every entry of the finalized archive. """
        if self.content is None:
            raise ContainerFinalizationFailure('Container %s not finalized' % self.name)
        with zipfile.ZipFile(io.BytesIO(self.content)) as zip_:
            for info_ in zip_.infolist():
                yield info_.filename, zip_.read(info_)


    def get_entry(self, name):
        """ Return the bytes of an appended entry, or None. """
        for entry_name, content in self.entries:
            if entry_name == name:
                return content
        return None
