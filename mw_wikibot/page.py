"""
This submodule contains the Page and PageContent objects.

PageContent does no I/O: every operation works on its ``text`` using the
namespace names and regex set of the wiki it came from.

.. code-block:: python

    page = wiki.get_page_by_title('Foo')
    page.content.add_to_category('Stubs')
    page.content.set_template_parameter('Infobox', 'name', 'Foo')
    wiki.save_page(page, 'Tidying up')
"""
import re
from collections import namedtuple
from .excs import BotDisallowed, ValidationError
from .templates import (mask_spans, parse_template, template_title,
                        format_template_like)
from .text import format_title, capitalize, uncapitalize, first_letter_pattern

__all__ = [
    'Page',
    'PageContent',
    'Section',
]

Section = namedtuple('Section', 'title text level')
Section.__doc__ = ('A run of page text under one heading. The text before '
                   'the first heading has an empty title and level 0.')

_HEADING = re.compile(r'^(={1,5})[ \t]*(.+?)[ \t]*\1[ \t]*$', re.M)
_GALLERY = re.compile(r'<gallery\b[^>]*>(.*?)</gallery>', re.I | re.S)

_HTML_MARKUP = [
    (r'<(h{0})( [^/>]+?)?>(.+?)</\1>\n?'.format(level),
     '\n{0} \\3 {0}\n'.format('=' * level), re.I | re.S)
    for level in range(1, 7)
] + [
    (r'\n?\n?<p( [^/>]+?)?>(.+?)</p>', r'\n\n\2', re.I | re.S),
    (r'<a href ?= ?["\'](https?:[^"\']+)["\']>(.+?)</a>', r'[\1 \2]',
     re.I | re.S),
    (r'</?(b|strong)>', "'''", re.I),
    (r'</?(i|em)>', "''", re.I),
    (r'\n?<hr ?/?>\n?', '\n----\n', re.I),
    (r'<(hr|br)( [^/>]+?)? ?/?>', r'<\1\2 />', re.I),
]

_HTML_TABLES = [
    (r'>\s+<', '><'),
    (r'<table( ?[^>]*)>', r'\n{|\1\n'),
    (r'</table>', '|}\n'),
    (r'<caption( ?[^>]*)>', r'|+\1 | '),
    (r'</caption>', '\n'),
    (r'<tr( ?[^>]*)>', r'|-\1\n'),
    (r'</tr>', '\n'),
    (r'<th([^>]*)>', r'!\1 | '),
    (r'</th>', '\n'),
    (r'<td([^>]*)>', r'|\1 | '),
    (r'</td>', '\n'),
    (r'\n(\||\|\+|!) \| ', r'\n\1 '),
]

def _blank(match):
    return '_' * len(match.group())

#pylint: disable=too-many-public-methods
class PageContent:
    """The title and wikitext of a page.

    Create one with ``Wiki.create_page_content`` (or get one with a fetched
    Page) so that it knows the wiki's namespaces and regexes.

    A read-only PageContent refuses any change to its text: the page
    carries bot exclusion markup aimed at this bot.
    """
    #pylint: disable=too-many-arguments
    def __init__(self, title=None, text=None, namespaces=None, regexes=None,
                 disambig=None):
        """Initialize the content. ``title`` is normalized."""
        self._title = None
        self._text = text
        self.read_only = False
        self.namespaces = namespaces
        self.regexes = regexes
        self.disambig = disambig
        if title is not None:
            self.title = title

    def __repr__(self):
        """Represent the content."""
        return '<PageContent of {}>'.format(self.title)

    def __str__(self):
        return self.text or ''

    @property
    def title(self):
        """The normalized title of the page."""
        return self._title

    @title.setter
    def title(self, value):
        self._title = format_title(value)

    @property
    def text(self):
        """The wikitext of the page."""
        return self._text

    @text.setter
    def text(self, value):
        if self.read_only:
            raise BotDisallowed('Page "{}" excludes this bot; its text cannot'
                                ' be changed.'.format(self.title))
        self._text = value

    @property
    def namespace(self):
        """The namespace index of the page."""
        return self.namespaces.get_namespace(self.title)

    def correct_ns_prefix(self):
        """Rewrite the title's namespace prefix in the local form."""
        self.title = self.namespaces.correct_ns_prefix(self.title)

    # redirects and disambiguation pages

    @property
    def is_redirect(self):
        """Whether the text is a redirect."""
        return bool(self.text) and bool(self.regexes.redirect.match(self.text))

    def redirects_to(self):
        """Return the redirect target, or None if this is not a redirect."""
        match = self.regexes.redirect.match(self.text or '')
        if match is None:
            return None
        return match.group(1).strip()

    @property
    def is_disambig(self):
        """Whether the text uses one of the wiki's disambiguation templates."""
        if not self.disambig or not self.text:
            return False
        return bool(re.search(r'\{\{\s*(?:' + self.disambig + r')\s*}}',
                              self.text, re.I))

    # templates

    def get_templates(self, with_parameters=False, include_pages=False):
        """List the templates used in the text, left to right.

        Parser functions, magic words and variables are left out, as is
        anything inside ``<nowiki>``. Unless ``with_parameters`` is True
        only titles are returned. Transcluded pages (``{{:Foo}}``,
        ``{{User:Foo}}``) and ``msgnw:`` calls are only listed if
        ``include_pages`` is True, without their ``:``/``msgnw:`` prefix.
        """
        source = self.text or ''
        templates = []
        for start, stop in reversed(self._template_spans(source)):
            body = source[start + 2:stop - 2].strip()
            if not body or body.startswith('#'):
                continue
            transcluded = False
            if body.lower().startswith('msgnw:'):
                body = body[len('msgnw:'):].strip()
                transcluded = True
            elif self.regexes.magic_words_and_vars.match(body):
                continue
            if body.startswith(':'):
                body = body.lstrip(':').strip()
                transcluded = True
            elif (self.regexes.all_ns_prefixes.match(body)
                  and self.namespaces.get_namespace(body) != 10):
                transcluded = True
            if transcluded and not include_pages:
                continue
            if not with_parameters:
                body = template_title(body)
            templates.append(body)
        return templates

    def _template_spans(self, text):
        """Return the ``(start, stop)`` spans of the ``{{...}}`` calls in
        ``text`` outside ``<nowiki>``. On template pages ``{{{parameters}}}``
        are not calls.
        """
        text = self.regexes.no_wiki_markup.sub(_blank, text)
        if self.title and self.namespace == 10:
            text = re.sub(r'\{\{\{.*?}}}', _blank, text, flags=re.S)
        return mask_spans(text)[1]

    def _template_pattern(self, title):
        title = self.namespaces.remove_ns_prefix(title.strip(), 10)
        return re.compile(
            r'^\s*(?:(?i:' + self.namespaces.get_ns_prefixes(10) + r')\s*:\s*)?'
            + first_letter_pattern(title) + r'\s*(?:\||$)')

    def add_template(self, template):
        """Add a template call (full wikitext) before the first category
        link, or at the end of the text if there is none.
        """
        if not template:
            raise ValidationError('No template specified.')
        text = self.text or ''
        match = re.search(
            r'([^}]\n|}})\n*\[\[\s*(?i:'
            + self.namespaces.get_ns_prefixes(14) + r')\s*:', text)
        if match is None:
            text += '\n\n' + template
        else:
            cut = match.end(1)
            text = (text[:cut] + '\n' + template + '\n\n'
                    + text[cut:].lstrip('\n'))
        self.text = text.rstrip('\r\n')

    def remove_template(self, title):
        """Remove every call of the template ``title``, with its line break.

        The first letter of the title matches in either case.
        """
        pattern = self._template_pattern(title)
        text = self.text or ''
        spans = self._template_spans(text)
        doomed = [span for span in spans
                  if pattern.match(text[span[0] + 2:span[1] - 2])]
        if not doomed:
            return
        # a call nested in another doomed call goes with it
        outermost = [(start, stop) for start, stop in doomed
                     if not any(other != (start, stop)
                                and other[0] <= start and stop <= other[1]
                                for other in doomed)]
        for start, stop in sorted(outermost, reverse=True):
            if text.startswith('\r\n', stop):
                stop += 2
            elif text.startswith('\n', stop):
                stop += 1
            text = text[:start] + text[stop:]
        self.text = text

    def get_template_parameter(self, title, param):
        """Return the values of ``param`` in every call of template ``title``."""
        pattern = self._template_pattern(title)
        values = []
        for template in self.get_templates(True, False):
            if pattern.match(template):
                params = parse_template(template)
                if param in params:
                    values.append(params[param])
        return values

    def set_template_parameter(self, title, param, value, first_only=False):
        """Set ``param`` to ``value`` in calls of template ``title``.

        The layout of each call (inline or not, spacing, padding) is kept.
        A ``value`` of None removes the parameter.
        """
        pattern = self._template_pattern(title)
        text = self.text or ''
        spans = [span for span in self._template_spans(text)
                 if pattern.match(text[span[0] + 2:span[1] - 2])]
        # a call nested in another call of the same template is left alone
        spans = sorted(
            (start, stop) for start, stop in spans
            if not any(other != (start, stop)
                       and other[0] <= start and stop <= other[1]
                       for other in spans))
        edits = []
        for start, stop in spans:
            inner = text[start + 2:stop - 2]
            template = inner.strip()
            params = parse_template(template)
            if value is None:
                if param not in params:
                    continue
                del params[param]
            else:
                params[param] = value
            replacement = format_template_like(template_title(template),
                                               params, template)
            lead = len(inner) - len(inner.lstrip())
            inner = (inner[:lead] + replacement[2:-2].rstrip('\n')
                     + inner[lead + len(template):])
            edits.append((start + 2, stop - 2, inner))
            if first_only:
                break
        if not edits:
            return
        for start, stop, inner in reversed(edits):
            text = text[:start] + inner + text[stop:]
        self.text = text

    def remove_template_parameter(self, title, param, first_only=False):
        """Remove ``param`` from calls of template ``title``."""
        self.set_template_parameter(title, param, None, first_only)

    # categories

    def get_categories(self, with_prefix=True, with_sort_key=False):
        """List the categories the text puts the page in."""
        text = self.regexes.no_wiki_markup.sub('', self.text or '')
        prefix = self.namespaces.get_ns_prefix(14)
        categories = []
        for match in self.regexes.category.finditer(text):
            name = match.group(4).strip()
            if with_prefix:
                name = prefix + name
            if with_sort_key and match.group(5):
                name += match.group(5)
            categories.append(name)
        return categories

    def add_to_category(self, name):
        """Add a category link, unless the page is already in it.

        ``name`` may carry a namespace prefix and a ``|sort key``.
        """
        name = self.namespaces.remove_ns_prefix(name.strip(), 14)
        bare = name.split('|', 1)[0].strip().replace('_', ' ')
        if not bare:
            raise ValidationError('No category specified.')
        present = [category.replace('_', ' ')
                   for category in self.get_categories(False, False)]
        if capitalize(bare) in present or uncapitalize(bare) in present:
            return
        text = self.text or ''
        text += (('' if present else '\n') + '\n[['
                 + self.namespaces.get_ns_prefix(14) + name + ']]\n')
        self.text = text.rstrip('\r\n')

    def remove_from_category(self, name):
        """Remove the first link to category ``name``, whatever its sort key."""
        name = self.namespaces.remove_ns_prefix(name.strip(), 14)
        name = name.split('|', 1)[0].strip()
        if not name:
            raise ValidationError('No category specified.')
        text = self.text or ''
        match = re.search(
            r'\[\[\s*(?i:' + self.namespaces.get_ns_prefixes(14) + r')\s*:\s*'
            + first_letter_pattern(name) + r'\s*(\|.*?)?]]\r?\n?',
            self.regexes.no_wiki_markup.sub(_blank, text))
        if match is not None:
            text = text[:match.start()] + text[match.end():]
            self.text = text.rstrip('\r\n')

    # links

    def all_links(self):
        """List the targets of every wikilink, whatever its namespace."""
        return [match.group('title').strip()
                for match in self.regexes.wiki_link.finditer(self.text or '')]

    def links(self):
        """List the targets of wikilinks to pages, leaving out category
        and file links.
        """
        skip = re.compile(r'^\s*(?:' + self.namespaces.get_ns_prefixes(6)
                          + '|' + self.namespaces.get_ns_prefixes(14)
                          + r')\s*:', re.I)
        return [link for link in self.all_links() if not skip.match(link)]

    def images(self):
        """List the files the text shows, including ``<gallery>`` entries."""
        text = self.text or ''
        prefixes = self.namespaces.get_ns_prefixes(6)
        prefix = self.namespaces.get_ns_prefix(6)
        images = [prefix + match.group(1).strip() for match in re.finditer(
            r'\[\[\s*(?i:' + prefixes + r')\s*:\s*([^|\]]+)', text)]
        line = re.compile(r'^\s*(?i:' + prefixes + r')\s*:\s*([^|\]\r\n]+)',
                          re.M)
        for gallery in _GALLERY.finditer(text):
            images.extend(prefix + match.group(1).strip()
                          for match in line.finditer(gallery.group(1)))
        return images

    def external_links(self):
        """List the external URLs in the text."""
        return [match.group(0)
                for match in self.regexes.web_link.finditer(self.text or '')]

    # sections

    def sections(self):
        """Split the text at headings (levels 1 to 5)."""
        text = self.text or ''
        headings = list(_HEADING.finditer(text))
        end = headings[0].start() if headings else len(text)
        sections = [Section('', text[:end], 0)]
        for i, heading in enumerate(headings):
            end = headings[i + 1].start() if i + 1 < len(headings) else len(text)
            sections.append(Section(heading.group(2), text[heading.end():end],
                                    len(heading.group(1))))
        return sections

    # HTML clean-up

    def convert_html_markup(self):
        """Turn common HTML markup (headings, paragraphs, links, bold,
        italics, rules) into wiki markup. See also convert_html_tables.
        """
        text = self.text or ''
        for pattern, replacement, flags in _HTML_MARKUP:
            text = re.sub(pattern, replacement, text, flags=flags)
        self.text = text

    def convert_html_tables(self):
        """Turn HTML tables into wiki tables."""
        text = self.text or ''
        if '</table>' not in text:
            return
        for pattern, replacement in _HTML_TABLES:
            text = re.sub(pattern, replacement, text)
        self.text = text.replace('\n\n|', '\n|')

class Page:
    """A page fetched from a wiki.

    ``revision`` is the last known Revision, ``last_load_time`` when the
    page was fetched (UTC). Both feed edit conflict detection and are
    reset to None by a successful save.
    """
    #pylint: disable=too-many-arguments
    def __init__(self, content=None, revision=None, page_id=None,
                 last_load_time=None, last_user_id=None,
                 last_minor_edit=False, watched=False):
        """Initialize a page."""
        self.content = content if content is not None else PageContent()
        self.revision = revision
        self.page_id = page_id
        self.last_load_time = last_load_time
        self.last_user_id = last_user_id
        self.last_minor_edit = last_minor_edit
        self.watched = watched

    def __repr__(self):
        """Represent a page instance."""
        return "<Page {name}>".format(name=self.title)

    def __eq__(self, other):
        """Check if two pages are the same."""
        return isinstance(other, Page) and self.title == other.title

    def __hash__(self):
        """Page.__hash__() <==> hash(Page)"""
        return hash(self.title)

    @property
    def title(self):
        """The title of the page."""
        return self.content.title

    @property
    def text(self):
        """The wikitext of the page."""
        return self.content.text
