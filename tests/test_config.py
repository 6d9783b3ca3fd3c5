#!/usr/bin/env python
# -*- coding: utf-8 -*-
'''
run this with
python -m unittest -v tests.test_config
'''
import unittest
import urllib.parse

from r2epub.CommonCode import InvalidSourceUrl, MissingDocumentConfig, SchemaValidationFailure
from r2epub.Config import RespecConfig, RespecOptions, get_book_configuration, get_respec_options
from r2epub.Fetcher import (
    SPEC_GENERATOR, check_web_url, mediatype_from_content_type, respec_url, unicode_content)


class TestRespecConfig(unittest.TestCase):

    def test_from_dict(self):
        config = RespecConfig.from_dict({
            'shortName': 'epub-33',
            'specStatus': 'ED',
            'editors': [{'name': 'Matt Garrish', 'company': 'DAISY Consortium'},
                        {'name': 'Ivan Herman'},
                        {'company': 'nameless'}],
            'maxTocLevel': 2,
        })
        self.assertEqual(config.short_name, 'epub-33')
        self.assertEqual(config.spec_status, 'ED')
        self.assertEqual(config.creators, ['Matt Garrish, DAISY Consortium', 'Ivan Herman'])
        self.assertEqual(config.max_toc_level, 2)
        self.assertIsNone(config.publish_date)

    def test_defaults(self):
        config = RespecConfig.from_dict({'shortName': 'x'})
        self.assertEqual(config.spec_status, 'base')
        self.assertEqual(config.creators, [])
        self.assertIsNone(config.max_toc_level)

    def test_lenient(self):
        config = RespecConfig.from_dict({
            'shortName': 'x', 'specStatus': '', 'maxTocLevel': 'deep',
            'editors': 'nobody', 'github': 'w3c/x', 'lint': {'no-headingless-sections': False}})
        self.assertEqual(config.spec_status, 'base')
        self.assertIsNone(config.max_toc_level)
        self.assertEqual(config.editors, [])

    def test_no_short_name(self):
        with self.assertRaises(MissingDocumentConfig):
            RespecConfig.from_dict({'specStatus': 'REC'})
        with self.assertRaises(MissingDocumentConfig):
            RespecConfig.from_dict([])


class TestBookConfiguration(unittest.TestCase):

    def test_valid(self):
        config = get_book_configuration({
            'title': 'Collection',
            'name': 'coll-1.0',
            'comment': 'two documents',
            'chapters': [
                {'url': 'https://example.org/a/'},
                {'url': 'https://example.org/b/', 'respec': True,
                 'config': {'specStatus': 'WD', 'addSectionLinks': False, 'maxTocLevel': 3}},
            ],
        })
        self.assertEqual(config.title, 'Collection')
        self.assertEqual(config.name, 'coll-1.0')
        self.assertEqual(len(config.chapters), 2)
        self.assertFalse(config.chapters[0].respec)
        self.assertFalse(config.chapters[0].config)
        second = config.chapters[1]
        self.assertTrue(second.options.respec)
        self.assertEqual(dict(second.config.items()),
                         {'specStatus': 'WD', 'addSectionLinks': 'false', 'maxTocLevel': '3'})

    def test_all_errors_reported(self):
        with self.assertRaises(SchemaValidationFailure) as cm:
            get_book_configuration({
                'name': 'no spaces allowed',
                'chapters': [{'respec': 'yes'}, {'url': 'https://example.org/',
                                                'config': {'publishDate': '1 May 2021'}}],
                'extra': 1,
            })
        errors = cm.exception.errors
        self.assertGreaterEqual(len(errors), 5)
        self.assertTrue(any(e.startswith('title') for e in errors))
        self.assertTrue(any(e.startswith('name') for e in errors))
        self.assertTrue(any('extra' in e for e in errors))
        self.assertTrue(any('publishDate' in e for e in errors))

    def test_chapter_options_checked(self):
        with self.assertRaises(SchemaValidationFailure) as cm:
            get_book_configuration({
                'title': 't', 'name': 'n',
                'chapters': [{'url': 'https://example.org/',
                              'config': {'maxTocLevel': -1, 'lint': False}}],
            })
        errors = cm.exception.errors
        self.assertEqual(len(errors), 2)
        self.assertTrue(any(e.startswith('chapters.0.config.maxTocLevel') for e in errors))
        self.assertTrue(any(e.startswith('chapters.0.config.lint') for e in errors))

    def test_blank_title(self):
        with self.assertRaises(SchemaValidationFailure) as cm:
            get_book_configuration({'title': '   ', 'name': 'n',
                                    'chapters': [{'url': 'https://example.org/'}]})
        self.assertEqual(len(cm.exception.errors), 1)
        self.assertTrue(cm.exception.errors[0].startswith('title'))

    def test_no_chapters(self):
        with self.assertRaises(SchemaValidationFailure):
            get_book_configuration({'title': 't', 'name': 'n', 'chapters': []})

    def test_not_an_object(self):
        with self.assertRaises(SchemaValidationFailure):
            get_book_configuration(['title'])


class TestRespecOptions(unittest.TestCase):

    def test_items(self):
        opts = RespecOptions(publishDate='2021-05-01', addSectionLinks='true', maxTocLevel='2')
        self.assertEqual(list(opts.items()), [('publishDate', '2021-05-01'),
                                              ('addSectionLinks', 'true'),
                                              ('maxTocLevel', '2')])
        self.assertTrue(opts)
        self.assertFalse(RespecOptions())

    def test_user_input(self):
        self.assertEqual(dict(get_respec_options(specStatus='WD').items()), {'specStatus': 'WD'})
        with self.assertRaises(SchemaValidationFailure) as cm:
            get_respec_options(publishDate='yesterday', maxTocLevel='deep')
        self.assertEqual(len(cm.exception.errors), 2)


class TestUrls(unittest.TestCase):

    def test_good_urls(self):
        for url in ('https://www.w3.org/TR/epub-33/',
                    'http://example.org/doc.html',
                    'https://example.org:443/doc.html',
                    'http://localhost:8080/doc.html'):
            self.assertEqual(check_web_url(url), url)

    def test_bad_urls(self):
        for url in ('ftp://example.org/doc.html',
                    'file:///etc/passwd',
                    'example.org/doc.html',
                    'http:///doc.html',
                    'http://example.org:22/doc.html',
                    'http://example.org:443/doc.html',
                    'http://example.org:99999/doc.html'):
            with self.assertRaises(InvalidSourceUrl, msg=url):
                check_web_url(url)

    def test_respec_url(self):
        url = respec_url('https://example.org/doc.html')
        self.assertTrue(url.startswith(SPEC_GENERATOR + '?type=respec&url='))
        self.assertIn(urllib.parse.quote('https://example.org/doc.html', safe=''), url)

        url = respec_url('https://example.org/doc.html',
                         RespecOptions(specStatus='REC', maxTocLevel='2'))
        query = urllib.parse.parse_qs(urllib.parse.urlsplit(url).query)
        self.assertEqual(query['type'], ['respec'])
        self.assertEqual(query['url'],
                         ['https://example.org/doc.html?specStatus=REC&maxTocLevel=2'])


class TestDecoding(unittest.TestCase):

    def test_mediatype(self):
        self.assertEqual(mediatype_from_content_type('text/HTML; charset=UTF-8'), 'text/html')
        self.assertEqual(mediatype_from_content_type('application/json'), 'application/json')

    def test_unicode_content(self):
        data = 'Çà et là'.encode('iso-8859-1')
        self.assertEqual(unicode_content(data, 'text/html; charset=iso-8859-1'), 'Çà et là')
        data = '<meta charset="utf-8"><p>Ünïcödé</p>'.encode('utf-8')
        self.assertEqual(unicode_content(data), '<meta charset="utf-8"><p>Ünïcödé</p>')


if __name__ == '__main__':
    unittest.main()
