"""This submodule contains the small classes."""
import html
import re
from collections import namedtuple
from .siteinfo import SiteInformation

__all__ = [
    'Revision',
    'UserContrib',
    'RecentChange',
    'WikidataItem',
    'Compare',
    'Meta',
]

class _CachedAttribute: # pylint: disable=too-few-public-methods
    '''Computes attribute value and caches it in the instance.
    From the Python Cookbook (Denis Otkidach)
    This decorator allows you to create a property which can be computed once
    and accessed many times. Sort of like memoization.
    Delete the attribute from the instance to have it computed again.
    '''
    def __init__(self, method, name=None):
        """Initialize the cached attribute."""
        self.method = method
        self.name = name or method.__name__
        self.__doc__ = method.__doc__

    def __get__(self, inst, cls):
        """Get the cached attribute."""
        if inst is None:
            return self
        result = self.method(inst)
        # shadows the descriptor until deleted
        setattr(inst, self.name, result)
        return result

Revision = namedtuple('Revision', 'id user comment timestamp')
Revision.__doc__ = 'A revision of a page, as returned by history queries.'

UserContrib = namedtuple('UserContrib', 'namespace title comment timestamp')
UserContrib.__doc__ = "One edit from a user's contributions."

RecentChange = namedtuple('RecentChange',
                          'id user title type timestamp old_revid revid')
RecentChange.__doc__ = 'An entry from Special:RecentChanges.'

WikidataItem = namedtuple('WikidataItem', 'id sitelinks')
WikidataItem.__doc__ = ('A Wikidata item id and its sitelinks, a dict of '
                        'site id to title.')

SITEINFO_PROPS = ('general|namespaces|namespacealiases|magicwords'
                  '|interwikimap|fileextensions|variables')

_INS = re.compile(r'<ins\b[^>]*>(.*?)</ins>', re.S)
_DEL = re.compile(r'<del\b[^>]*>(.*?)</del>', re.S)

class Compare:
    """The result of action=compare: an HTML diff table."""
    def __init__(self, content):
        """Initialize with the diff HTML."""
        self.content = content

    def __repr__(self):
        """Represent a diff."""
        return '<Compare +{} -{}>'.format(len(self.insertions),
                                          len(self.deletions))

    __str__ = __repr__

    @property
    def insertions(self):
        """Text fragments added by the newer revision."""
        return [html.unescape(part) for part in _INS.findall(self.content)]

    @property
    def deletions(self):
        """Text fragments removed by the newer revision."""
        return [html.unescape(part) for part in _DEL.findall(self.content)]

class Meta:
    """A separate class for the API "meta" module."""
    def __init__(self, wiki):
        """Initialize the instance with its wiki."""
        self.wiki = wiki

    def __repr__(self):
        """Represent the Meta instance (there should only ever be one!)."""
        return '<Meta>'

    __str__ = __repr__

    def tokens(self, kind='csrf'):
        """Get a token for a database-modifying action.

        The parameter "kind" specifies the type. If more than one type is
        requested (separated by ``|``) a dict of all of them is returned;
        a token the wiki did not hand out comes back as None.
        """
        data = self.wiki.request(action='query', meta='tokens', type=kind)
        tokens = data.get('query', {}).get('tokens', {})
        if '|' in kind:
            return tokens
        return tokens.get(kind + 'token')

    def userinfo(self, prop=None):
        """Retrieve info about the currently logged-in user.

        The parameter "prop" specifies what kind of information to retrieve.
        """
        data = self.wiki.request(action='query', meta='userinfo',
                                 uiprop=prop)
        return data['query']['userinfo']

    def siteinfo(self, prop=SITEINFO_PROPS):
        """Retrieve information about the site as a SiteInformation.

        See https://www.mediawiki.org/wiki/API:Siteinfo for the properties.
        """
        return self.wiki.request(_kind=SiteInformation, action='query',
                                 meta='siteinfo', siprop=prop)
