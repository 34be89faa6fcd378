"""Test parsing and formatting template calls."""
from unittest import TestCase
import mw_wikibot as mw
from mw_wikibot.templates import (mask_spans, template_title, parse_template,
                                  format_template, format_template_like)

class TestTemplates(TestCase):
    """Test the templates module."""
    def test_parse_named(self):
        """Test named parameters."""
        self.assertEqual(parse_template('Cite|title=Foo|access-date=2020-01-01'),
                         {'title': 'Foo', 'access-date': '2020-01-01'})
    def test_parse_positional(self):
        """Test that positional parameters are keyed by position."""
        self.assertEqual(parse_template('Infobox|Name|2=Bar'),
                         {'1': 'Name', '2': 'Bar'})
    def test_parse_nested(self):
        """Test that nested templates and links are not split."""
        self.assertEqual(
            parse_template('{{Foo| a = {{Bar|x=1}} |[[Link|text]]}}'),
            {'a': '{{Bar|x=1}}', '2': '[[Link|text]]'})
    def test_parse_empty(self):
        """Test that an empty template is rejected."""
        with self.assertRaises(mw.ValidationError):
            parse_template('')
    def test_template_title(self):
        """Test getting the title of a call."""
        self.assertEqual(template_title('{{ Foo |a={{b}}}}'), 'Foo')
        self.assertEqual(template_title('Foo'), 'Foo')
    def test_mask_spans(self):
        """Test that inner spans are masked before outer ones."""
        masked, spans = mask_spans('a{{b{{c}}d}}e')
        self.assertEqual(masked, 'a' + '_' * 11 + 'e')
        self.assertEqual(spans, [(4, 9), (1, 12)])
    def test_mask_unclosed(self):
        """Test that an unclosed opening is masked but not reported."""
        masked, spans = mask_spans('{{a}} {{b')
        self.assertEqual(masked, '_____ __b')
        self.assertEqual(spans, [(0, 5)])
    def test_format_inline(self):
        """Test formatting on one line."""
        self.assertEqual(
            format_template('Infobox', {'1': 'Name', 'type': 'x'},
                            inline=True),
            '{{Infobox|Name|type = x}}')
        self.assertEqual(
            format_template('Infobox', {'name': 'Foo'}, inline=True,
                            without_spaces=True),
            '{{Infobox|name=Foo}}')
    def test_format_multiline(self):
        """Test formatting one parameter per line."""
        self.assertEqual(
            format_template('Infobox', {'name': 'Foo', 'age': '3'}),
            '{{Infobox\n| name = Foo\n| age = 3\n}}')
        self.assertEqual(format_template('Stub', {}), '{{Stub}}')
    def test_format_padding(self):
        """Test aligning the equals signs."""
        self.assertEqual(
            format_template('Infobox', {'name': 'Foo', 'age': '3'},
                            padding=-1),
            '{{Infobox\n| name = Foo\n| age  = 3\n}}')
    def test_format_no_padding(self):
        """Test that inline calls and calls without spaces are not padded."""
        self.assertEqual(
            format_template('X', {'a': '1'}, inline=True, padding=3),
            '{{X|a = 1}}')
        self.assertEqual(
            format_template('X', {'a': '1', 'long': '2'},
                            without_spaces=True, padding=-1),
            '{{X\n|a=1\n|long=2\n}}')
        self.assertEqual(
            format_template_like('X', {'a': '1', 'long': '2'},
                                 '{{X|a  = 1|long = 2}}'),
            '{{X|a = 1|long = 2}}')
    def test_format_like(self):
        """Test copying the layout of an existing call."""
        self.assertEqual(
            format_template_like('Infobox', {'name': 'Foo', 'age': '4'},
                                 '{{Infobox\n| name = Foo\n| age  = 3\n}}'),
            '{{Infobox\n| name = Foo\n| age  = 4\n}}')
        self.assertEqual(
            format_template_like('cite', {'a': '1', 'b': '3'},
                                 '{{cite|a=1|b=2}}'),
            '{{cite|a=1|b=3}}')
    def test_round_trip(self):
        """Test that formatting a parsed template parses back the same."""
        for body in ('Cite|title=Foo|access-date=2020-01-01',
                     'Infobox|Name|2=Bar|x = {{y|z=1}}',
                     'Foo|one|two|[[a|b]]|k=v'):
            params = parse_template(body)
            for inline in (True, False):
                formatted = format_template(template_title(body), params,
                                            inline=inline)
                self.assertEqual(parse_template(formatted), params)
