"""
Turn raw response bodies into typed results.

Every parser takes the body text as its only argument. The registry picks
one by the type of result asked for:

.. code-block:: python

    registry = ParserRegistry(DEFAULT_PARSERS)
    page = registry.deserialize(body, Page)
    history = registry.deserialize(body, Revision)   # a list of Revisions
"""
import json
from datetime import datetime, timezone
from warnings import warn as _warn
from .excs import ConfigurationError, WikiWarning
from .misc import Compare, RecentChange, Revision, UserContrib
from .page import Page, PageContent
from .siteinfo import SiteInformation, parse_site_information, parse_timestamp

__all__ = [
    'ParserRegistry',
    'DEFAULT_PARSERS',
    'parse_json',
    'parse_page',
    'parse_page_history',
    'parse_recent_changes',
    'parse_user_contribs',
    'parse_compare',
]

class ParserRegistry:
    """Parsers keyed by the type of result they produce.

    ``str`` is always supported and returns the body untouched.
    """
    def __init__(self, *parser_sets):
        """Register every mapping in ``parser_sets``, later ones winning."""
        self._parsers = {}
        for parsers in parser_sets:
            for kind, parser in parsers.items():
                self.register(kind, parser)

    def __repr__(self):
        """Represent the registry."""
        return '<ParserRegistry for {}>'.format(
            ', '.join(sorted(kind.__name__ for kind in self._parsers)))

    def __contains__(self, kind):
        return kind is str or kind in self._parsers

    def register(self, kind, parser):
        """Use ``parser`` for results of type ``kind``, replacing any
        parser registered for it before.
        """
        self._parsers[kind] = parser

    def require(self, *kinds):
        """Raise ConfigurationError unless every kind has a parser."""
        for kind in kinds:
            if kind not in self:
                raise ConfigurationError(
                    'No parser found for type {}.'.format(kind.__name__))

    def deserialize(self, body, kind):
        """Parse ``body`` into a result of type ``kind``."""
        if kind is str:
            return body
        try:
            parser = self._parsers[kind]
        except KeyError:
            raise ConfigurationError(
                'No parser found for type {}.'.format(kind.__name__))
        return parser(body)

def parse_json(body):
    """Decode a JSON API response, issuing a WikiWarning for each
    warning the API sent back.
    """
    data = json.loads(body) if body else {}
    for module, value in data.get('warnings', {}).items():
        _warn('warning from {} module: {}'.format(
            module,
            value.get('*', value) if isinstance(value, dict) else value
        ), WikiWarning)
    return data

def _first_page(data):
    pages = data.get('query', {}).get('pages', {})
    return next(iter(pages.values()), None)

def _revision_text(revision):
    if 'slots' in revision:
        return revision['slots']['main'].get('*', '')
    return revision.get('*', '')

def parse_page(body):
    """Parse a ``prop=revisions`` response for a single page.

    Return None if the page (or revision) does not exist.
    """
    data = json.loads(body)
    page = _first_page(data)
    if page is None or 'missing' in page or 'invalid' in page:
        return None
    revision = page.get('revisions', [{}])[0]
    return Page(
        content=PageContent(page['title'], _revision_text(revision)),
        revision=Revision(revision.get('revid'), revision.get('user'),
                          revision.get('comment'),
                          parse_timestamp(revision.get('timestamp'))),
        page_id=page.get('pageid'),
        last_load_time=datetime.now(timezone.utc),
        last_user_id=revision.get('userid'),
        last_minor_edit='minor' in revision,
        watched='watched' in page,
    )

def parse_page_history(body):
    """Parse a ``prop=revisions`` response into a list of Revisions."""
    page = _first_page(json.loads(body)) or {}
    return [Revision(rev.get('revid'), rev.get('user'), rev.get('comment'),
                     parse_timestamp(rev.get('timestamp')))
            for rev in page.get('revisions', ())]

def parse_recent_changes(body):
    """Parse a ``list=recentchanges`` response."""
    changes = json.loads(body).get('query', {}).get('recentchanges', ())
    return [RecentChange(change.get('rcid'), change.get('user'),
                         change.get('title'), change.get('type'),
                         parse_timestamp(change.get('timestamp')),
                         change.get('old_revid'), change.get('revid'))
            for change in changes]

def parse_user_contribs(body):
    """Parse a ``list=usercontribs`` response."""
    contribs = json.loads(body).get('query', {}).get('usercontribs', ())
    return [UserContrib(item.get('ns'), item.get('title'),
                        item.get('comment'),
                        parse_timestamp(item.get('timestamp')))
            for item in contribs]

def parse_compare(body):
    """Parse an ``action=compare`` response; None if there is no diff."""
    compare = json.loads(body).get('compare')
    if compare is None:
        return None
    return Compare(compare.get('*', ''))

DEFAULT_PARSERS = {
    dict: parse_json,
    Page: parse_page,
    Revision: parse_page_history,
    RecentChange: parse_recent_changes,
    UserContrib: parse_user_contribs,
    Compare: parse_compare,
    SiteInformation: parse_site_information,
}
