"""
Site metadata and the regex set compiled from it.

The regex set depends only on the namespace names, magic words, interwiki
prefixes and redirect keywords of a site, so it can be built and tested
without a network connection:

.. code-block:: python

    namespaces = NamespaceDictionary({6: ('File', 'File'),
                                      14: ('Category', 'Category')})
    regexes = build_regex_set(namespaces, ['REDIRECT'])
    regexes.redirect.match('#REDIRECT [[Target]]').group(1)
"""
import json
import locale
import re
from collections import namedtuple
from datetime import datetime, timezone
from .namespaces import NamespaceDictionary

__all__ = [
    'RegexSet',
    'SiteInformation',
    'build_regex_set',
    'select_culture',
    'parse_timestamp',
    'parse_site_information',
]

TIMESTAMP_FORMAT = '%Y-%m-%dT%H:%M:%SZ'

RegexSet = namedtuple('RegexSet', [
    'redirect',
    'magic_words_and_vars',
    'all_ns_prefixes',
    'interwiki_link',
    'category',
    'image',
    'link_to_image',
    'link_to_image2',
    'title_link',
    'title_link_in_list',
    'title_link_in_table',
    'title_link_shown',
    'link_to_subcategory',
    'wiki_link',
    'wiki_template',
    'web_link',
    'no_wiki_markup',
    'edit_token',
    'edit_time',
    'start_time',
    'base_rev_id',
])
RegexSet.__doc__ = 'Compiled patterns for one site. Built by build_regex_set.'

_NEVER = r'(?!)'

def _alternation(names):
    return '|'.join(re.escape(name) for name in names if name)

def _magic_word(alias):
    pattern = re.escape(alias)
    if not alias.endswith(':'):
        # PAGENAME must not match PAGENAMEE or PAGENAMEFOO
        pattern += r'(?![^\s:|])'
    return pattern

def _hidden_field(name):
    return re.compile(
        r'value="([^"]+)"[^>]+name="{0}"|name="{0}"[^>]+value="([^"]+)"'
        .format(name), re.I)

def build_regex_set(namespaces, redirect_tags, magic_words=(), variables=(),
                    interwiki=()):
    """Compile the RegexSet of a site.

    ``magic_words`` is a sequence of ``(alias, case_sensitive)`` pairs,
    ``variables`` a sequence of variable ids and ``interwiki`` a sequence
    of interwiki prefixes.
    """
    tags = _alternation(redirect_tags) or 'REDIRECT'
    files = namespaces.get_ns_prefixes(6)
    categories = namespaces.get_ns_prefixes(14)
    everything = namespaces.get_all_ns_prefixes() or _NEVER
    prefixes = _alternation(interwiki)

    sensitive = [_magic_word(alias) for alias, case in magic_words if case]
    insensitive = [_magic_word(alias) for alias, case in magic_words
                   if not case]
    insensitive.extend(_magic_word(name) for name in variables)
    magic = sensitive
    if insensitive:
        magic.append('(?i:' + '|'.join(insensitive) + ')')

    return RegexSet(
        redirect=re.compile(
            r'^ *#(?:' + tags + r')\s*:?\s*\[\[(.+?)(\|.+)?]]', re.I),
        magic_words_and_vars=re.compile(
            r'^(?:' + ('|'.join(magic) or _NEVER) + ')'),
        all_ns_prefixes=re.compile(r'^(?:' + everything + '):', re.I),
        interwiki_link=re.compile(
            r'\[\[((' + prefixes + r'):(.+?))]]' if prefixes else _NEVER,
            re.I),
        category=re.compile(
            r'\[\[\s*(((' + categories + r'):(.+?))(\|.+?)?)]]', re.I),
        image=re.compile(
            r'\[\[((' + files + r'):(.+?))(\|(.+?))*?]]', re.I),
        link_to_image=re.compile(
            r'<div class="gallerytext">\n<a href="[^"]*?" title="([^"]+?)">'),
        link_to_image2=re.compile(
            r'<a href="[^"]*?" title="('
            + re.escape(namespaces.get_ns_prefix(6)) + r'[^"]+?)">'),
        title_link=re.compile(r'<a [^>]*title="(?P<title>.+?)"'),
        title_link_in_list=re.compile(
            r'<li(?: [^>]*)?>\s*<a [^>]*title="(?P<title>.+?)"'),
        title_link_in_table=re.compile(
            r'<td(?: [^>]*)?>\s*<a [^>]*title="(?P<title>.+?)"'),
        title_link_shown=re.compile(
            r'<a [^>]*title="([^"]+)"[^>]*>\s*\1\s*</a>'),
        link_to_subcategory=re.compile(
            r'>([^<]+)</a></div>\s*<div class="CategoryTreeChildren"'),
        wiki_link=re.compile(
            r'\[\[(?P<link>(?P<title>.+?)(?P<params>\|.+?)?)]]'),
        wiki_template=re.compile(r'\{\{(.+?)((\|.*?)*?)}}', re.S),
        web_link=re.compile(
            r'(https?|t?ftp|news|nntp|telnet|irc|gopher)://([^\s\'"<>]+)'),
        no_wiki_markup=re.compile(r'<nowiki>(.*?)</nowiki>', re.I | re.S),
        edit_token=_hidden_field('wpEditToken'),
        edit_time=_hidden_field('wpEdittime'),
        start_time=_hidden_field('wpStarttime'),
        base_rev_id=_hidden_field('baseRevId'),
    )

def select_culture(language):
    """Return the ``(language, regional)`` locale names for a site language.

    An unknown language gives the invariant ``C`` locale for both; a
    language with no regional locale of its own borrows the first related
    one, then ``C``.
    """
    language = (language or '').replace('-', '_').lower()
    aliases = locale.locale_alias
    if language not in aliases:
        return 'C', 'C'
    current = locale.getlocale()[0] or ''
    if current.split('_')[0].lower() == language:
        return language, current
    regional = locale.normalize(language).split('.')[0]
    if '_' not in regional:
        related = sorted(name.split('.')[0] for name in aliases.values()
                         if name.lower().startswith(language + '_'))
        regional = related[0] if related else 'C'
    return language, regional

def parse_timestamp(value):
    """Parse an API timestamp into an aware UTC datetime (None for empty)."""
    if not value:
        return None
    return datetime.strptime(value, TIMESTAMP_FORMAT).replace(
        tzinfo=timezone.utc)

class SiteInformation:
    """General information about a wiki, gathered at bootstrap.

    ``regexes`` is None until ``compile_regexes`` is called.
    """
    def __init__(self, **data):
        """Initialize the site information by copying kwargs to __dict__."""
        self.namespaces = NamespaceDictionary()
        self.name = None
        self.language = None
        self.regexes = None
        self.redirect_aliases = ()
        self.magic_words = ()
        self.variables = ()
        self.interwiki = ()
        self.time_offset_seconds = 0
        self.__dict__.update(data)

    def __repr__(self):
        """Represent the site information."""
        return '<SiteInformation for {}>'.format(self.name)

    __str__ = __repr__

    def compile_regexes(self, redirect_tags):
        """Build the RegexSet from ``redirect_tags``, a mapping of language
        code to redirect keywords, plus the site's own redirect aliases.
        """
        tags = list(redirect_tags.get(self.language, ('REDIRECT',)))
        for alias in self.redirect_aliases:
            if alias.upper() not in (tag.upper() for tag in tags):
                tags.append(alias)
        self.regexes = build_regex_set(self.namespaces, tags,
                                       self.magic_words, self.variables,
                                       self.interwiki)
        return self.regexes

def parse_site_information(body):
    """Parse a ``meta=siteinfo`` response."""
    query = json.loads(body)['query']
    general = query['general']

    magic_words = []
    redirect_aliases = []
    for word in query.get('magicwords', ()):
        for alias in word.get('aliases', ()):
            magic_words.append((alias, 'case-sensitive' in word))
            if word['name'] == 'redirect':
                redirect_aliases.append(alias.lstrip('#'))

    server_time = parse_timestamp(general['time'])
    offset = server_time - datetime.now(timezone.utc)
    version = re.sub(r'[^\d.]', '', general.get('generator', ''))
    lang_culture, reg_culture = select_culture(general.get('lang'))

    return SiteInformation(
        name=general.get('sitename'),
        software=general.get('generator'),
        version=tuple(int(part) for part in version.split('.') if part),
        language=general.get('lang'),
        lang_culture=lang_culture,
        reg_culture=reg_culture,
        capitalization=general.get('case'),
        short_path=general.get('articlepath', '').replace('$1', ''),
        time_offset=general.get('timeoffset', 0),
        server_time=server_time,
        time_offset_seconds=int(offset.total_seconds()) - 2,
        namespaces=NamespaceDictionary.from_siteinfo(
            query['namespaces'], query.get('namespacealiases', ())),
        interwiki=[iw['prefix'] for iw in query.get('interwikimap', ())],
        magic_words=magic_words,
        variables=list(query.get('variables', ())),
        redirect_aliases=redirect_aliases,
    )
