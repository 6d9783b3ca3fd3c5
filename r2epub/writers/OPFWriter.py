#!/usr/bin/env python
#  -*- mode: python; indent-tabs-mode: nil; -*- coding: UTF8 -*-

"""

OPFWriter.py

Copyright 2020-2021 by the r2epub authors

Distributable under the GNU General Public License Version 3 or newer.

Builds the package document (package.opf).

"""

import copy

from lxml import etree
from lxml.builder import ElementMaker

import libgutenberg.GutenbergGlobals as gg
from libgutenberg.GutenbergGlobals import NS
from libgutenberg.Logger import debug

from r2epub.CommonCode import Options

options = Options()

LANGUAGE = 'en-us'
LICENSE = 'https://www.w3.org/Consortium/Legal/2015/doc-license'
PUBLISHER = 'World Wide Web Consortium'
ATTRIBUTION_URL = 'https://www.w3.org'


class Package(object):
    """ Class that builds package.opf.

    Example of the metadata built:

  <metadata>
    <dc:identifier id="pub-id">https://www.w3.org/TR/epub-33/</dc:identifier>
    <dc:title id="title">EPUB 3.3</dc:title>
    <dc:language>en-us</dc:language>
    <meta property="title-type" refines="#title">main</meta>
    <meta property="cc:attributionURL">https://www.w3.org</meta>
    <dc:rights>https://www.w3.org/Consortium/Legal/2015/doc-license</dc:rights>
    <dc:publisher>World Wide Web Consortium</dc:publisher>
    <link rel="cc:license" href="https://www.w3.org/Consortium/Legal/2015/doc-license"/>
    <dc:creator id="creator_id_0">Matt Garrish, DAISY Consortium</dc:creator>
    <meta refines="#creator_id_0" property="role" scheme="marc:relators">edt</meta>
    <meta property="dcterms:date">2021-05-03T00:00:00Z</meta>
    <meta property="dcterms:modified">2021-05-03T00:00:00Z</meta>
  </metadata>

    """

    def __init__(self, identifier, title):
        self.nsmap = {None: str(NS.opf), 'dc': str(NS.dc)}
        self.opf = ElementMaker(namespace=str(NS.opf), nsmap=self.nsmap)
        self.dc = ElementMaker(namespace=str(NS.dc), nsmap=self.nsmap)

        self.identifier = identifier
        self.title = title
        self.creators = []
        self.date = None

        self.metadata = self.opf.metadata()
        self.manifest = self.opf.manifest()
        self.spine = self.opf.spine()

        self.item_id = 0     # for generated manifest ids
        self.creator_id = 0  # for generated creator ids
        self.hrefs = set()
        self.ids = set()

        self.metadata.append(self.dc.identifier(identifier, id='pub-id'))
        self.metadata.append(self.dc.title(title, id='title'))
        self.metadata.append(self.dc.language(LANGUAGE))
        self.meta_item('title-type', 'main', refines='#title')
        self.meta_item('cc:attributionURL', ATTRIBUTION_URL)
        self.metadata.append(self.dc.rights(LICENSE))
        self.metadata.append(self.dc.publisher(PUBLISHER))
        self.metadata.append(self.opf.link(rel='cc:license', href=LICENSE))

        self.accessibility_items()


    def __str__(self):
        return self.serialize()


    def meta_item(self, property_, content, **attribs):
        """ Add a meta item to metadata. """
        attribs['property'] = property_
        self.metadata.append(self.opf.meta(content, **attribs))


    def accessibility_items(self):
        """ Add accessibility metadata. """
        self.meta_item('schema:accessMode', 'textual')
        self.meta_item('schema:accessMode', 'visual')
        self.meta_item('schema:accessModeSufficient', 'textual')
        self.meta_item('schema:accessibilityFeature', 'tableOfContents')
        self.meta_item('schema:accessibilityFeature', 'readingOrder')
        self.meta_item('schema:accessibilityFeature', 'structuralNavigation')
        self.meta_item('schema:accessibilityHazard', 'none')
        self.meta_item('schema:accessibilitySummary',
                       'The publication follows the structure of the W3C technical report '
                       'it was generated from.')


    def add_creators(self, creators):
        """ Add creators, each refined as editor. """

        for creator in creators:
            id_ = 'creator_id_%d' % self.creator_id
            self.creator_id += 1
            self.creators.append(creator)
            self.metadata.append(self.dc.creator(creator, id=id_))
            self.meta_item('role', 'edt', refines='#' + id_, scheme='marc:relators')


    def add_dates(self, date):
        """ Set publication and modification date. Both are the same for W3C documents. """

        self.date = date
        stamp = '%sT00:00:00Z' % date
        self.meta_item('dcterms:date', stamp)
        self.meta_item('dcterms:modified', stamp)


    def manifest_item(self, url, mediatype, id_=None, prop=None):
        """ Add item to manifest. Return the id used. """

        if url in self.hrefs:
            raise ValueError('Duplicate manifest item: %s' % url)

        if id_ is None or id_ in self.ids:
            self.item_id += 1
            id_ = 'res_id%d' % self.item_id
            while id_ in self.ids:
                self.item_id += 1
                id_ = 'res_id%d' % self.item_id

        manifest_atts = {'href': url, 'id': id_, 'media-type': mediatype}
        if prop:
            manifest_atts['properties'] = prop
        self.manifest.append(self.opf.item(**manifest_atts))
        self.hrefs.add(url)
        self.ids.add(id_)

        return id_


    def add_manifest_item(self, ref):
        """ Add a ResourceRef to the manifest. """
        return self.manifest_item(ref.relative_url, ref.media_type, ref.id, ref.properties)


    def spine_item(self, idref):
        """ Add an itemref to the spine. """
        self.spine.append(self.opf.itemref(idref=idref))


    def manifest_ids(self):
        """ Manifest ids in document order. """
        return [item.get('id') for item in self.manifest]


    def spine_idrefs(self):
        """ Spine idrefs in reading order. """
        return [itemref.get('idref') for itemref in self.spine]


    def serialize(self):
        """ Serialize package.opf as unicode string. """

        assert len(self.manifest) > 0, 'No manifest item in package.opf.'
        assert len(self.spine) > 0, 'No spine item in package.opf.'

        package = self.opf.package(**{
            'prefix': 'cc: http://creativecommons.org/ns#',
            'unique-identifier': 'pub-id',
            'version': '3.0',
            NS.xml.lang: LANGUAGE})
        package.append(copy.deepcopy(self.metadata))
        package.append(copy.deepcopy(self.manifest))
        package.append(copy.deepcopy(self.spine))

        package_opf = "%s\n\n%s" % (gg.XML_DECLARATION,
                                    etree.tostring(package,
                                                   encoding=str,
                                                   pretty_print=True))

        if (getattr(options, 'verbose', 0) or 0) >= 3:
            debug(package_opf)
        return package_opf
