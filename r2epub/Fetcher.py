#!/usr/bin/env python
#  -*- mode: python; indent-tabs-mode: nil; -*- coding: UTF8 -*-

"""

Fetcher.py

Copyright 2020-2021 by the r2epub authors

Distributable under the GNU General Public License Version 3 or newer.

Get documents and resources off the web.

All methods that go out on the network are coroutines. The blocking
requests calls run in worker threads so that many lookups can be
pending at the same time.

"""

import asyncio
import json
import re
import urllib.parse

import chardet
import requests

from libgutenberg.Logger import debug, error, info
from libgutenberg import MediaTypes

from r2epub.CommonCode import InvalidSourceUrl, ResourceUnreachable, SchemaValidationFailure
from r2epub.parsers import HTMLParser, HeaderElement
from r2epub.Version import VERSION

SPEC_GENERATOR = 'https://labs.w3.org/spec-generator/'

USER_AGENT = "r2epub/%s (+https://github.com/iherman/r2epub)" % VERSION

DEFAULT_PORTS = {'http': 80, 'https': 443}

REB_HTML_CHARSET = re.compile(br'<meta[^>]+charset\s*=\s*["\']?([-\w.:]+)', re.I)

# all bogus encoding names seen in the wild go in here
BOGUS_CHARSET_NAMES = {'iso-latin-1': 'iso-8859-1',
                       'macintosh': 'mac_roman',
                      }

JSON_MEDIATYPES = ('application/json', 'application/ld+json')


def check_web_url(url):
    """ Check that url is a usable http(s) url.

    Return the url, or raise InvalidSourceUrl.

    """

    try:
        parsed = urllib.parse.urlsplit(url)
        port = parsed.port
    except (ValueError, TypeError, AttributeError) as what:
        raise InvalidSourceUrl('"%s": the URL isn\'t valid (%s)' % (url, what))

    if not parsed.scheme:
        raise InvalidSourceUrl('"%s": Invalid URL: no protocol' % url)
    if parsed.scheme.lower() not in DEFAULT_PORTS:
        raise InvalidSourceUrl('"%s": URL is not dereferencable' % url)
    if not parsed.hostname or re.search(r'\s', url):
        raise InvalidSourceUrl('"%s": the URL isn\'t valid' % url)
    if port is not None and port <= 1024 and port != DEFAULT_PORTS[parsed.scheme.lower()]:
        raise InvalidSourceUrl('"%s": Unsafe port number used in URL (%d)' % (url, port))

    return url


def respec_url(url, config=None):
    """ Return the spec generator url that renders url with ReSpec.

    config is a RespecOptions; the values set in it are passed on to
    ReSpec as query parameters of the source url.

    """

    if config:
        query = urllib.parse.urlencode(list(config.items()))
        sep = '&' if urllib.parse.urlsplit(url).query else '?'
        url = url + sep + query
    return '%s?type=respec&url=%s' % (SPEC_GENERATOR, urllib.parse.quote(url, safe=''))


def mediatype_from_content_type(content_type):
    """ Return the bare media type from a Content-Type header value. """
    return HeaderElement.from_str(content_type).value.lower()


def decode(data, charset):
    """ Try to decode bytes to unicode. """
    if charset is None:
        return None

    charset = charset.lower().strip()
    charset = BOGUS_CHARSET_NAMES.get(charset, charset)
    if charset in ('utf-8', 'utf8'):
        charset = 'utf_8_sig'

    try:
        debug("Trying to decode document with charset %s ..." % charset)
        return data.decode(charset)
    except LookupError as what:
        # unknown charset
        error("Invalid charset name: %s (%s)" % (charset, what))
    except UnicodeError as what:
        # mis-stated charset, did not decode
        error("Text not in charset %s (%s)" % (charset, what))
    return None


def get_charset_from_meta(data):
    """ Look for a html meta charset. """
    match = REB_HTML_CHARSET.search(data[:4096])
    if match:
        charset = match.group(1).decode('ascii', 'replace')
        debug('Got charset %s from meta' % charset)
        return charset
    return None


def guess_charset_from_body(data):
    """ Guess charset from text. """
    charset = chardet.detect(data).get('encoding')
    if charset:
        debug('Got charset %s from text sniffing' % charset)
    return charset


def unicode_content(data, content_type=None):
    """ Decode bytes, trying the server charset, then meta, then sniffing. """

    server_charset = None
    if content_type:
        server_charset = HeaderElement.from_str(content_type).params.get('charset')

    text = (decode(data, server_charset) or
            decode(data, get_charset_from_meta(data)) or
            decode(data, guess_charset_from_body(data)) or
            decode(data, 'utf-8') or
            decode(data, 'windows-1252'))
    if text is None:
        raise UnicodeError("Text in Klingon encoding ... giving up.")
    return text


class Fetcher(object):
    """ Fetch things from the web.

    The coroutines raise ResourceUnreachable on any network or HTTP
    error and InvalidSourceUrl on urls we refuse to touch.

    """

    def __init__(self, user_agent=None, proxies=None, timeout=None):
        self.user_agent = user_agent or USER_AGENT
        self.proxies = proxies
        self.timeout = float(timeout) if timeout else 60.0


    @classmethod
    def from_config(cls, config):
        """ Create a fetcher from the [Fetcher] section of the config files. """
        return cls(user_agent=getattr(config, 'USER_AGENT', None),
                   proxies=getattr(config, 'PROXIES', None),
                   timeout=getattr(config, 'TIMEOUT', None))


    def _request(self, method, url):
        """ Do the blocking http request. """

        check_web_url(url)
        debug("%s %s ..." % (method, url))
        proxies = self.proxies
        if isinstance(proxies, str):
            proxies = {'http': proxies, 'https': proxies}
        try:
            response = requests.request(
                method,
                url,
                headers={'User-Agent': self.user_agent},
                proxies=proxies,
                timeout=self.timeout,
                allow_redirects=True,
            )
        except requests.RequestException as what:
            raise ResourceUnreachable('"%s": %s' % (url, what))
        return response


    def _get(self, url):
        response = self._request('GET', url)
        if not response.ok:
            raise ResourceUnreachable('"%s": HTTP status %d (%s)' % (
                url, response.status_code, response.reason))
        return response


    def _media_type(self, url):
        response = self._request('HEAD', url)
        if response.status_code in (405, 501):
            # some servers do not do HEAD
            response = self._get(url)
        elif not response.ok:
            raise ResourceUnreachable('"%s": HTTP status %d (%s)' % (
                url, response.status_code, response.reason))

        content_type = response.headers.get('Content-Type')
        if content_type:
            mediatype = mediatype_from_content_type(content_type)
            debug("... got mediatype %s from server" % mediatype)
        else:
            mediatype = MediaTypes.guess_type(urllib.parse.urlsplit(url).path)
            debug("... got mediatype %s from guess_type" % mediatype)
        return mediatype or 'application/octet-stream'


    def _text(self, url):
        response = self._get(url)
        return unicode_content(response.content, response.headers.get('Content-Type'))


    async def fetch_bytes(self, url):
        """ Get the raw content of url. """
        response = await asyncio.to_thread(self._get, url)
        return response.content


    async def fetch_media_type(self, url):
        """ Get the media type of url, without its parameters. """
        return await asyncio.to_thread(self._media_type, url)


    async def fetch_text(self, url):
        """ Get the content of url as unicode. """
        return await asyncio.to_thread(self._text, url)


    async def fetch_document(self, url, respec=False, config=None):
        """ Get and parse a html document.

        With respec set the document is rendered by the ReSpec spec
        generator first. Returns the root of an xhtml tree.

        """

        check_web_url(url)
        fetch_url = respec_url(url, config) if respec else url
        if respec:
            info('Rendering %s via the spec generator' % url)
        text = await self.fetch_text(fetch_url)
        return HTMLParser.parse_document(text, url)


    async def fetch_json(self, url):
        """ Get and parse a json document. """
        text = await self.fetch_text(url)
        try:
            return json.loads(text)
        except ValueError as what:
            raise SchemaValidationFailure(['"%s": not a json document: %s' % (url, what)])
