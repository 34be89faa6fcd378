"""Test site information and the regex set built from it."""
import copy
import json
from datetime import datetime, timedelta, timezone
from unittest import TestCase
from mw_wikibot.data import REDIRECT_TAGS
from mw_wikibot.siteinfo import (build_regex_set, select_culture,
                                 parse_timestamp, parse_site_information,
                                 TIMESTAMP_FORMAT)
from mw_wikibot.tests.fakes import SITEINFO, make_site_information

class TestSiteInformation(TestCase):
    """Test parsing meta=siteinfo."""
    def test_general(self):
        """Test the general site properties."""
        info = make_site_information()
        self.assertEqual(info.name, 'Example Wiki')
        self.assertEqual(info.version, (1, 35, 0))
        self.assertEqual(info.language, 'en')
        self.assertEqual(info.short_path, '/wiki/')
        self.assertEqual(info.redirect_aliases, ['REDIRECT', 'VERWEIS'])
        self.assertEqual(info.interwiki, ['wikt', 'fr'])
        self.assertEqual(info.namespaces.get_ns_prefix(4), 'Example:')
    def test_time_offset(self):
        """Test that the clock offset is measured against the server."""
        data = copy.deepcopy(SITEINFO)
        server = datetime.now(timezone.utc) + timedelta(seconds=100)
        data['query']['general']['time'] = server.strftime(TIMESTAMP_FORMAT)
        info = parse_site_information(json.dumps(data))
        self.assertIn(info.time_offset_seconds, (96, 97, 98))
    def test_parse_timestamp(self):
        """Test parsing API timestamps as UTC."""
        self.assertEqual(parse_timestamp('2020-01-02T03:04:05Z'),
                         datetime(2020, 1, 2, 3, 4, 5, tzinfo=timezone.utc))
        self.assertIsNone(parse_timestamp(''))
        self.assertIsNone(parse_timestamp(None))
    def test_select_culture(self):
        """Test picking locales for the site language."""
        self.assertEqual(select_culture('xx-nonexistent'), ('C', 'C'))
        language, regional = select_culture('en')
        self.assertEqual(language, 'en')
        self.assertTrue(regional.lower().startswith('en'))

class TestRegexSet(TestCase):
    """Test the compiled patterns."""
    def setUp(self):
        self.regexes = make_site_information().regexes
    def test_redirect(self):
        """Test redirect keywords, including the site's own aliases."""
        redirect = self.regexes.redirect
        self.assertEqual(redirect.match('#REDIRECT [[Target page]]').group(1),
                         'Target page')
        self.assertEqual(redirect.match('#redirect:[[Target]]').group(1),
                         'Target')
        self.assertEqual(redirect.match('#verweis [[X|y]]').group(1), 'X')
        self.assertIsNone(redirect.match('Text #REDIRECT [[X]]'))
    def test_redirect_tags_by_language(self):
        """Test that the reference table entry of the language is used."""
        info = make_site_information()
        info.language = 'de'
        regexes = info.compile_regexes(REDIRECT_TAGS)
        self.assertTrue(regexes.redirect.match('#WEITERLEITUNG [[Ziel]]'))
    def test_magic_words(self):
        """Test telling magic words and variables from templates."""
        magic = self.regexes.magic_words_and_vars
        self.assertTrue(magic.match('PAGENAME'))
        self.assertTrue(magic.match('DEFAULTSORT:Foo'))
        self.assertTrue(magic.match('lc:FOO'))
        self.assertTrue(magic.match('CurrentYear'))
        self.assertIsNone(magic.match('defaultsort:Foo'))
        self.assertIsNone(magic.match('PAGENAMEE'))
        self.assertIsNone(magic.match('Infobox'))
    def test_no_magic_words(self):
        """Test that an empty magic word table matches nothing."""
        regexes = build_regex_set(make_site_information().namespaces,
                                  ['REDIRECT'])
        self.assertIsNone(regexes.magic_words_and_vars.match('PAGENAME'))
        self.assertIsNone(regexes.interwiki_link.search('[[wikt:word]]'))
    def test_links(self):
        """Test the category, interwiki and namespace patterns."""
        match = self.regexes.category.search('x [[Category:Foo|Bar]] y')
        self.assertEqual(match.group(4), 'Foo')
        self.assertEqual(match.group(5), '|Bar')
        self.assertEqual(
            self.regexes.interwiki_link.search('[[wikt:word]]').group(3),
            'word')
        self.assertTrue(self.regexes.all_ns_prefixes.match('image:X.png'))
        self.assertIsNone(self.regexes.all_ns_prefixes.match('Foo:Bar'))
        match = self.regexes.wiki_link.search('[[Foo bar|baz]]')
        self.assertEqual(match.group('title'), 'Foo bar')
        self.assertEqual(match.group('params'), '|baz')
    def test_hidden_fields(self):
        """Test scraping hidden form fields in either attribute order."""
        html = ('<input type="hidden" value="abc+\\" name="wpEditToken" />'
                '<input name="wpStarttime" type="hidden" value="2020" />')
        match = self.regexes.edit_token.search(html)
        self.assertEqual(match.group(1), 'abc+\\')
        match = self.regexes.start_time.search(html)
        self.assertEqual(match.group(2), '2020')
        self.assertIsNone(self.regexes.base_rev_id.search(html))
