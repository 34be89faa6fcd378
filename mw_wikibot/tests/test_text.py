"""Test the string helpers."""
import re
from unittest import TestCase
from urllib.parse import quote
import mw_wikibot as mw
from mw_wikibot import text

class TestText(TestCase):
    """Test the text module."""
    def test_format_title(self):
        """Test that leading colons and underscores go away."""
        self.assertEqual(text.format_title(':Foo_bar'), 'Foo bar')
        self.assertEqual(text.format_title('::Category:A_b_c'),
                         'Category:A b c')
    def test_format_title_idempotent(self):
        """Test that normalizing a title twice changes nothing."""
        for title in (':Foo_bar', 'Foo bar', '::x_', 'Talk:_Baz', 'ä_ö'):
            once = text.format_title(title)
            self.assertEqual(text.format_title(once), once)
    def test_format_title_empty(self):
        """Test that an empty title is rejected."""
        with self.assertRaises(mw.ValidationError):
            text.format_title('')
        with self.assertRaises(mw.ValidationError):
            text.format_title(None)
    def test_capitalize(self):
        """Test changing the case of the first letter only."""
        self.assertEqual(text.capitalize('foo Bar'), 'Foo Bar')
        self.assertEqual(text.uncapitalize('FOO'), 'fOO')
        self.assertEqual(text.capitalize(''), '')
    def test_first_letter_pattern(self):
        """Test the pattern matching a title with either first letter."""
        pattern = text.first_letter_pattern('foo bar (baz)')
        self.assertEqual(pattern, r'[Ff]oo[_ ]bar[_ ]\(baz\)')
        self.assertTrue(re.fullmatch(pattern, 'Foo_bar (baz)'))
        self.assertIsNone(re.fullmatch(pattern, 'FOO bar (baz)'))
        self.assertEqual(text.first_letter_pattern('1x'), '1x')
    def test_get_substring(self):
        """Test cutting text between two tags."""
        source = 'a<b>x</b>c'
        self.assertEqual(text.get_substring(source, '<b>', '</b>'),
                         '<b>x</b>')
        self.assertEqual(text.get_substring(source, '<b>', '</b>',
                                            True, True), 'x')
        self.assertEqual(text.get_substring(source, '<i>', '</b>'), '')
        self.assertEqual(text.get_substring(source, '<b>', '</i>',
                                            strict=False), '<b>x</b>c')
    def test_matches(self):
        """Test finding and counting occurrences."""
        self.assertEqual(text.match_positions('abab', 'ab'), [0, 2])
        self.assertEqual(text.count_matches('AbaB', 'ab'), 0)
        self.assertEqual(text.count_matches('AbaB', 'ab', ignore_case=True),
                         2)
        self.assertEqual(text.match_positions('', 'ab'), [])
    def test_html_decode(self):
        """Test decoding HTML entities."""
        self.assertEqual(text.html_decode('&amp;lt; &quot;'), '&lt; "')
    def test_url_encode(self):
        """Test percent-encoding."""
        self.assertEqual(text.url_encode('a b/c~'), 'a%20b%2Fc~')
        self.assertEqual(text.url_encode(''), '')
    def test_url_encode_chunks(self):
        """Test that a string longer than a chunk encodes like a whole."""
        long_text = 'ä b/&' * (text.URL_ENCODE_CHUNK // 2)
        self.assertGreater(len(long_text), text.URL_ENCODE_CHUNK)
        self.assertEqual(text.url_encode(long_text),
                         quote(long_text, safe='-_.~'))
