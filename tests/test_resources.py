#!/usr/bin/env python
# -*- coding: utf-8 -*-
'''
run this with
python -m unittest -v tests.test_resources
'''
import unittest

from libgutenberg.GutenbergGlobals import xpath

from r2epub.CommonCode import ResourceUnreachable, UnknownSpecStatus
from r2epub.CSSResolver import (
    BASE_CSS, EPUB_CSS, LOGOS, WATERMARK, get_status_style, resolve_css)
from r2epub.ResourceCollector import (
    W3C_LOGO, ResourceRef, collect_resources, find_local_references, local_path,
    merge_resources, set_w3c_logo)
from r2epub.parsers import HTMLParser

from tests.fakefetcher import FakeFetcher, make_fetcher, sample

URL = 'https://example.org/rec/'


def parse(filename, url=URL):
    xhtml = HTMLParser.parse_document(sample(filename).decode('utf-8'), url)
    return xhtml, HTMLParser.get_respec_config(xhtml)


class TestLocalPath(unittest.TestCase):

    def test_local(self):
        self.assertEqual(local_path('images/a.png'), 'images/a.png')
        self.assertEqual(local_path('./images/../images/a.png?x=1#top'), 'images/a.png')

    def test_not_local(self):
        for ref in (None, '', '#section', 'https://example.org/a.png',
                    '//example.org/a.png', 'mailto:a@example.org',
                    '/a.png', '../a.png', '.'):
            self.assertIsNone(local_path(ref), ref)


class TestResourceRef(unittest.TestCase):

    def test_exactly_one_source(self):
        with self.assertRaises(ValueError):
            ResourceRef('a.css', 'text/css')
        with self.assertRaises(ValueError):
            ResourceRef('a.css', 'text/css', absolute_url='https://x/a.css', text_content='')

    def test_merge(self):
        a = ResourceRef('a.css', 'text/css', text_content='first')
        b = ResourceRef('a.css', 'text/css', text_content='second')
        c = ResourceRef('b.css', 'text/css', text_content='third')
        self.assertEqual(merge_resources([a], [b, c]), [a, c])


class TestCollector(unittest.IsolatedAsyncioTestCase):

    def test_idempotent(self):
        xhtml, dummy_config = parse('sample-rec.html')
        first = find_local_references(xhtml)
        self.assertEqual(first, ['images/figure.png', 'local.css', 'diagrams/flow.svg'])
        self.assertEqual(find_local_references(xhtml), first)

    async def test_collect(self):
        xhtml, dummy_config = parse('sample-rec.html')
        fetcher = make_fetcher()
        resources = await collect_resources(xhtml, URL, fetcher)
        self.assertEqual([(r.relative_url, r.media_type, r.absolute_url) for r in resources], [
            ('images/figure.png', 'image/png', URL + 'images/figure.png'),
            ('local.css', 'text/css', URL + 'local.css'),
            ('diagrams/flow.svg', 'image/svg+xml', URL + 'diagrams/flow.svg'),
        ])

    async def test_order_does_not_depend_on_timing(self):
        xhtml, dummy_config = parse('sample-rec.html')
        fetcher = make_fetcher(delays={URL + 'images/figure.png': 0.05,
                                       URL + 'local.css': 0.02})
        resources = await collect_resources(xhtml, URL, fetcher)
        self.assertEqual([r.relative_url for r in resources],
                         ['images/figure.png', 'local.css', 'diagrams/flow.svg'])

    async def test_unreachable(self):
        xhtml, dummy_config = parse('sample-rec.html')
        with self.assertRaises(ResourceUnreachable):
            await collect_resources(xhtml, URL, FakeFetcher({}))

    def test_w3c_logo(self):
        xhtml, dummy_config = parse('sample-rec.html')
        logos = set_w3c_logo(xhtml)
        self.assertEqual(len(logos), 1)
        self.assertEqual(logos[0].relative_url, W3C_LOGO)
        self.assertEqual(logos[0].media_type, 'image/svg+xml')
        self.assertEqual(xpath(xhtml, "//xhtml:img[@alt = 'W3C']/@src"), [W3C_LOGO])

        xhtml, dummy_config = parse('sample-cg.html')
        self.assertEqual(set_w3c_logo(xhtml), [])


class TestCSSResolver(unittest.TestCase):

    def test_status_lookup(self):
        self.assertEqual(get_status_style('rec').logo_name, 'REC.svg')
        self.assertEqual(get_status_style('CG-FINAL').logo_name, 'back-cg-final.png')
        with self.assertRaises(UnknownSpecStatus):
            get_status_style('XYZ')

    def test_rec(self):
        xhtml, config = parse('sample-rec.html')
        resources = resolve_css(xhtml, config)
        self.assertEqual([r.relative_url for r in resources],
                         [BASE_CSS, LOGOS + 'REC.svg', EPUB_CSS])
        self.assertNotIn(WATERMARK, [r.relative_url for r in resources])
        self.assertEqual(resources[1].media_type, 'image/svg+xml')
        self.assertIsNotNone(resources[2].text_content)
        self.assertIn('logos/REC.svg', resources[2].text_content)

        hrefs = xpath(xhtml, "//xhtml:link[@rel = 'stylesheet']/@href")
        self.assertEqual(hrefs, [BASE_CSS, EPUB_CSS, 'local.css'])

    def test_cg_draft(self):
        xhtml, config = parse('sample-cg.html')
        resources = resolve_css(xhtml, config)
        urls = [r.relative_url for r in resources]
        self.assertEqual(urls, [BASE_CSS, LOGOS + 'back-cg-draft.png', WATERMARK, EPUB_CSS])
        self.assertEqual(resources[1].media_type, 'image/png')
        css = resources[-1].text_content
        self.assertIn('padding-left: 160px', css)
        self.assertIn('UD-watermark.png', css)
        self.assertIn('back-cg-draft.png', css)

    def resolve_as(self, spec_status):
        xhtml, config = parse('sample-rec.html')
        config = config.model_copy(update={'spec_status': spec_status})
        return resolve_css(xhtml, config)

    def test_bg_draft(self):
        resources = self.resolve_as('BG-DRAFT')
        self.assertEqual([r.relative_url for r in resources],
                         [BASE_CSS, LOGOS + 'back-bg-draft.png', EPUB_CSS])
        self.assertEqual(resources[1].media_type, 'image/png')
        css = resources[-1].text_content
        self.assertIn('padding-left: 150px', css)
        self.assertIn('logos/back-bg-draft.png', css)
        self.assertNotIn('UD-watermark.png', css)

    def test_unofficial(self):
        resources = self.resolve_as('unofficial')
        self.assertEqual([r.relative_url for r in resources],
                         [BASE_CSS, LOGOS + 'UD.png', WATERMARK, EPUB_CSS])
        self.assertEqual(resources[1].media_type, 'image/png')
        self.assertEqual(resources[2].media_type, 'image/png')
        css = resources[-1].text_content
        self.assertIn('logos/UD.png', css)
        self.assertIn('logos/UD-watermark.png', css)
        self.assertNotIn('padding-left', css)

    def test_cg_final(self):
        resources = self.resolve_as('CG-FINAL')
        self.assertEqual([r.relative_url for r in resources],
                         [BASE_CSS, LOGOS + 'back-cg-final.png', EPUB_CSS])
        css = resources[-1].text_content
        self.assertIn('padding-left: 160px', css)
        self.assertNotIn('UD-watermark.png', css)

    def test_unknown_status(self):
        xhtml, config = parse('sample-unknown.html')
        resources = resolve_css(xhtml, config)
        self.assertEqual([r.relative_url for r in resources], [BASE_CSS])
        self.assertEqual(xpath(xhtml, "//xhtml:link[@href = '%s']" % EPUB_CSS), [])


if __name__ == '__main__':
    unittest.main()
