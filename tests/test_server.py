#!/usr/bin/env python
# -*- coding: utf-8 -*-
'''
run this with
python -m unittest -v tests.test_server
'''
import unittest

from r2epub import R2Epub, Server
from r2epub.CommonCode import (
    ContainerFinalizationFailure, InvalidSourceUrl, ResourceUnreachable, SchemaValidationFailure,
    options)


class TestServer(unittest.TestCase):

    def test_home_page(self):
        page = Server.home_page('http://localhost:5000/')
        self.assertNotIn(Server.SERVER_PLACEHOLDER, page)
        self.assertIn('http://localhost:5000/?url=https://www.example.org/doc.html', page)

    def test_query_options(self):
        opts = Server.query_options()
        self.assertFalse(opts.respec)
        self.assertFalse(opts.config)

        opts = Server.query_options(respec='true')
        self.assertTrue(opts.respec)

        # any spec generator option implies respec
        opts = Server.query_options(specStatus='REC', maxTocLevel='2')
        self.assertTrue(opts.respec)
        self.assertEqual(dict(opts.config.items()), {'specStatus': 'REC', 'maxTocLevel': '2'})

        with self.assertRaises(SchemaValidationFailure):
            Server.query_options(maxTocLevel='-3')

    def test_http_status(self):
        self.assertEqual(Server.http_status(InvalidSourceUrl('x')), 400)
        self.assertEqual(Server.http_status(SchemaValidationFailure(['x'])), 400)
        self.assertEqual(Server.http_status(ResourceUnreachable('x')), 502)
        self.assertEqual(Server.http_status(ContainerFinalizationFailure('x')), 500)


class TestCommandLine(unittest.TestCase):

    def test_options(self):
        R2Epub.config(['-s', 'REC', '-m', '2', '--config', '/nonexistent',
                       'https://example.org/doc.html'])
        self.assertEqual(options.url, 'https://example.org/doc.html')
        self.assertFalse(options.respec)
        conversion = R2Epub.conversion_options()
        self.assertTrue(conversion.respec)
        self.assertEqual(dict(conversion.config.items()),
                         {'specStatus': 'REC', 'maxTocLevel': '2'})

    def test_trace(self):
        R2Epub.config(['-t', '--config', '/nonexistent', 'https://example.org/doc.html'])
        self.assertGreaterEqual(options.verbose, 1)
        self.assertFalse(R2Epub.conversion_options().respec)


if __name__ == '__main__':
    unittest.main()
