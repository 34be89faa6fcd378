"""
See the Wiki docstrings.
"""
#pylint: disable=too-many-lines
import html
import logging
import os
import re
import time
from datetime import datetime, timedelta, timezone
from urllib.parse import urljoin, urlparse
import requests
from .client import HttpClient
from .data import API_QUERIES, REDIRECT_TAGS
from .excs import (BotDisallowed, ConfigurationError, EditConflict,
                   InsufficientRights, LoginFailed, NotFound, ValidationError,
                   WikiError, raise_for_error)
from .misc import (Compare, Meta, RecentChange, Revision, UserContrib,
                   WikidataItem, _CachedAttribute)
from .page import Page, PageContent
from .parsers import DEFAULT_PARSERS, ParserRegistry
from .siteinfo import TIMESTAMP_FORMAT
from .text import capitalize, format_title, get_substring, url_encode

__all__ = [
    'Wiki',
    'connect',
    'normalize_address',
    'find_api_path',
]

LOG = logging.getLogger(__name__)

SAVE_DELAY = 5
MAXLAG = 5
RETRIES = 3

TOKEN_TYPES = ('csrf|deleteglobalaccount|patrol|rollback'
               '|setglobalaccountstatus|userrights|watch')
PAGE_PROPS = 'content|user|userid|comment|ids|flags|timestamp'
INFO_PROPS = 'protection|watched|watchers|notificationtimestamp|readable'
PROTECTION_LEVELS = {0: 'all', 1: 'autoconfirmed', 2: 'sysop'}
WIKIDATA_API = 'https://www.wikidata.org/w/api.php'
SITE_MATRIX = 'https://meta.wikimedia.org/wiki/Special:SiteMatrix'

_API_LINK = re.compile(r' href="(([^"]*)(index|api)\.php)', re.I)
_FILE_LINKS = (
    re.compile(r'<a href="([^"]+?)" class="internal"'),
    re.compile(r'<div class="fullImageLink" id="file"><a href="([^"]+?)"'),
)

# only connect() holds this, so only connect() can build a Wiki
_FACTORY = object()

def normalize_address(address):
    """Default the scheme to http and drop the slash of a bare host URL."""
    if not address:
        raise ValidationError('No site address specified.')
    address = address.strip()
    if not address.startswith('http'):
        address = 'http://' + address
    if address.count('/') == 3 and address.endswith('/'):
        address = address[:-1]
    return address

def find_api_path(address, page_html):
    """Find the path to index.php in the HTML of a wiki's home page."""
    parsed = urlparse(address)
    for match in _API_LINK.finditer(page_html or ''):
        link, folder = match.group(1), match.group(2)
        if link.startswith(address):
            path = folder + 'index.php'
        elif link.startswith('//' + parsed.netloc):
            path = parsed.scheme + ':' + folder + 'index.php'
        elif link.startswith('/') and not link.startswith('//'):
            path = address + folder + 'index.php'
        elif not folder:
            path = address + '/index.php'
        else:
            continue
        return path.replace('mediawiki/mediawiki', 'mediawiki')
    raise ConfigurationError(
        "Can't find path to index.php on {}.".format(address))

def connect(address, username, password, domain=None, **settings):
    """Connect to the wiki at ``address``, log in and return a Wiki.

    ``domain`` is the LDAP domain, for wikis that use one. ``settings``
    are passed to the Wiki:

    ``user_agent``
        the User-Agent header to send
    ``save_delay``
        the least number of seconds between two saves (5)
    ``maxlag``
        the replication lag, in seconds, past which the server should
        refuse our writes (5)
    ``retries``
        how many times a request is retried while the server is busy (3)
    ``redirect_tags``
        mapping of language code to redirect keywords
        (``mw_wikibot.data.REDIRECT_TAGS``)
    ``disambig``
        regex alternation of the disambiguation templates; found
        automatically on Wikipedia
    ``parsers``
        mapping of result type to parser, overriding the defaults
    ``client``
        the HttpClient to use
    """
    wiki = Wiki(_FACTORY, address, username, **settings)
    wiki._bootstrap(password, domain) #pylint: disable=protected-access
    return wiki

class Wiki: #pylint: disable=too-many-public-methods
    #pylint: disable=too-many-arguments,too-many-instance-attributes
    """A logged-in session on a wiki. Create one with ``connect``."""

    def __init__(self, _capability, address, username, user_agent=None,
                 save_delay=SAVE_DELAY, maxlag=MAXLAG, retries=RETRIES,
                 redirect_tags=REDIRECT_TAGS, disambig=None, parsers=None,
                 client=None):
        """Initialize the session. Nothing is sent until _bootstrap."""
        if _capability is not _FACTORY:
            raise TypeError('Use mw_wikibot.connect() to create a Wiki.')
        if not username:
            raise ValidationError('No user name specified.')
        self.address = normalize_address(address)
        self.username = username
        self.save_delay = save_delay
        self.redirect_tags = redirect_tags
        self.disambig = disambig
        self.client = client if client is not None else HttpClient(user_agent)
        self.maxlag = maxlag
        self.retries = retries
        self.parsers = ParserRegistry(DEFAULT_PARSERS, parsers or {})
        self.parsers.require(*DEFAULT_PARSERS)
        self.meta = Meta(self)
        self.index_path = None
        self.info = None
        self.tokens = {}
        self.last_write_time = None
        user = ''.join('[ _]' if char in ' _' else re.escape(char)
                       for char in username)
        self._exclusion = re.compile(
            r'\{\{\s*(?:nobots\s*|bots\s*\|\s*(?:allow\s*=\s*none'
            r'|deny\s*=\s*(?:[^}]*,\s*)?(?:' + user + r'|all)\s*(?:,[^}]*)?'
            r'|optout\s*=\s*all)\s*)}}', re.I)

    def __repr__(self):
        """Represent a Wiki object."""
        return "<Wiki at {addr}>".format(addr=self.address)

    def __eq__(self, other):
        """Check if two Wikis are equal."""
        return (isinstance(other, Wiki) and self.address == other.address
                and self.username == other.username)

    def __hash__(self):
        """Wiki.__hash__() <==> hash(Wiki)"""
        return hash((self.address, self.username))

    __str__ = __repr__

    @property
    def api_path(self):
        """The URL of api.php."""
        return self.index_path.replace('index.php', 'api.php')

    @property
    def maxlag(self):
        """The maxlag sent with every POST."""
        return self.client.maxlag

    @maxlag.setter
    def maxlag(self, value):
        self.client.maxlag = value

    @property
    def retries(self):
        """How many times a busy or failing request is retried."""
        return self.client.retries

    @retries.setter
    def retries(self, value):
        self.client.retries = value

    # bootstrap

    def _bootstrap(self, password, domain=None):
        """Find the API, load the site information and log in."""
        self.index_path = find_api_path(self.address,
                                        self.client.get(self.address))
        LOG.info('Found %s for %s', self.index_path, self.address)
        self.info = self.meta.siteinfo()
        self.info.compile_regexes(self.redirect_tags)
        if self.disambig is None:
            self.disambig = self.get_disambig()
        self.tokens = self.log_in(password, domain)

    def get_disambig(self):
        """Return a regex alternation of the disambiguation template and
        its redirects, or None for wikis other than Wikipedia.
        """
        if '.wikipedia.org' not in self.address:
            return None
        if '//en.wikipedia.org' in self.address:
            template = 'Template:Disambiguation'
        else:
            data = self.request(action='query', list='langbacklinks',
                                lbllang='en',
                                lbltitle='Template:Disambiguation')
            links = data.get('query', {}).get('langbacklinks', ())
            if not links:
                raise ConfigurationError(
                    'Cannot find the disambiguation template of {}; pass '
                    'disambig to connect().'.format(self.address))
            template = links[0]['title']
        names = [template]
        data = self.request(action='query', list='backlinks', bllimit=500,
                            blfilterredir='redirects', bltitle=template)
        names.extend(link['title']
                     for link in data.get('query', {}).get('backlinks', ()))
        namespaces = self.info.namespaces
        return '|'.join(re.escape(namespaces.remove_ns_prefix(name, 10))
                        for name in names)

    def log_in(self, password, domain=None):
        """Log in and return the action tokens of the account, by name
        (e.g. ``csrftoken``).

        Raise LoginFailed if the wiki refuses the credentials.
        """
        body = self.client.get_and_save_cookies(self.api_path, params={
            'action': 'query',
            'meta': 'tokens',
            'type': 'login',
            'format': 'json',
        })
        data = self.parsers.deserialize(body, dict)
        try:
            login_token = data['query']['tokens']['logintoken']
        except KeyError:
            raise LoginFailed('Could not get a login token from {}.'.format(
                self.address))
        params = {
            'action': 'login',
            'format': 'json',
            'lgname': self.username,
            'lgpassword': password,
            'lgtoken': login_token,
        }
        if domain:
            params['lgdomain'] = domain
        body = self.client.post_and_save_cookies(self.api_path, data=params)
        login = self.parsers.deserialize(body, dict).get('login', {})
        if login.get('result') != 'Success':
            raise LoginFailed('Login to {} as {} failed: {}'.format(
                self.address, self.username,
                login.get('reason', login.get('result'))))
        LOG.info('Logged in to %s as %s', self.address, self.username)
        return dict(self.meta.tokens(TOKEN_TYPES))

    # requests

    def request(self, _post=False, _kind=dict, _raise=True, **params):
        """Inner request method.

        Remains public since it might be used per se. The response is
        parsed into ``_kind`` by the parser registry; a dict response
        holding an API error raises ``WikiError.<code>`` unless ``_raise``
        is False. Parameters set to None are not sent.
        """
        params['format'] = 'json'
        params = {key: value for key, value in params.items()
                  if value is not None}
        LOG.debug('%s %s', 'POST' if _post else 'GET', params.get('action'))
        if _post:
            body = self.client.post(self.api_path, data=params)
        else:
            body = self.client.get(self.api_path, params=params)
        result = self.parsers.deserialize(body, _kind)
        if _kind is dict and _raise:
            raise_for_error(result)
        return result

    def post_request(self, **params):
        """Same as request, except sent with POST."""
        return self.request(_post=True, **params)

    def get_security_tokens(self, title, action):
        """Return the ``prop=info`` data of a page along with the token
        for ``action`` (as ``<action>token``); ``missing`` is set if the
        page doesn't exist.
        """
        data = self.request(action='query', prop='info', intoken=action,
                            inprop=INFO_PROPS, titles=title)
        pages = data.get('query', {}).get('pages', {})
        return dict(next(iter(pages.values()), {}))

    def _token_for(self, title, action, must_exist=False):
        token = self.tokens.get('csrftoken')
        if token:
            return token
        info = self.get_security_tokens(title, action)
        if must_exist and 'missing' in info:
            raise NotFound('Page "{}" doesn\'t exist.'.format(title))
        token = info.get(action + 'token')
        if not token:
            raise InsufficientRights(
                'Insufficient rights to {} page "{}".'.format(action, title))
        return token

    def _throttle(self):
        if self.last_write_time is None or self.save_delay <= 0:
            return
        wait = self.save_delay - (time.time() - self.last_write_time)
        if wait > 0:
            LOG.debug('Waiting %.1f seconds before the next save', wait)
            time.sleep(wait)

    def _init_content(self, content):
        content.namespaces = self.info.namespaces
        content.regexes = self.info.regexes
        content.disambig = self.disambig
        return content

    # reading pages

    def _get_page(self, **selector):
        page = self.request(_kind=Page, action='query', prop='revisions',
                            rvprop=PAGE_PROPS, rvslots='main', **selector)
        if page is None:
            return None
        self._init_content(page.content)
        page.content.read_only = bool(
            self._exclusion.search(page.content.text or ''))
        return page

    def get_page_by_title(self, title):
        """Fetch a page by title. Return None if it doesn't exist."""
        return self._get_page(titles=format_title(title))

    def get_page_by_revision_id(self, revid):
        """Fetch a page at a given revision. Return None if there is no
        such revision.
        """
        if not revid or revid <= 0:
            raise ValidationError('Revision ID must be a positive integer.')
        return self._get_page(revids=revid)

    def create_page_content(self, title=None, text=None):
        """Return an empty PageContent bound to this wiki."""
        return self._init_content(PageContent(title, text))

    def resolve_redirect(self, page):
        """Return the page ``page`` redirects to, or ``page`` itself."""
        if not page.content.is_redirect:
            return page
        return self.get_page_by_title(page.content.redirects_to())

    def get_page_history(self, title, limit=50):
        """Return the last ``limit`` revisions of a page, newest first."""
        return self.request(_kind=Revision, action='query', prop='revisions',
                            titles=format_title(title),
                            rvprop='ids|user|comment|timestamp',
                            rvlimit=limit)

    def get_diff(self, from_revid, to_revid):
        """Compare two revisions. Return a Compare, or None."""
        return self.request(_kind=Compare, action='compare',
                            fromrev=from_revid, torev=to_revid)

    def get_user_contributions(self, user, limit=50, **evil):
        """Return the last ``limit`` edits of ``user``."""
        return self.request(_kind=UserContrib, action='query',
                            list='usercontribs', ucuser=user, uclimit=limit,
                            ucprop='ids|title|timestamp|comment', **evil)

    def get_recent_changes(self, limit=50, **evil):
        """Return the last ``limit`` edits and page creations."""
        return self.request(_kind=RecentChange, action='query',
                            list='recentchanges', rctype='edit|new',
                            rcprop='title|ids|sizes|flags|user|timestamp',
                            rclimit=limit, **evil)

    # writing pages

    def save_page(self, page, summary='', minor=True):
        """Save the text of ``page``.

        Saves are spaced at least ``save_delay`` seconds apart. Raise
        EditConflict if the page changed since it was loaded,
        InsufficientRights if the account may not edit it and
        BotDisallowed if the page excludes this bot or a captcha is
        demanded. Return the ``edit`` result of the API.
        """
        content = page.content
        if not content.text:
            raise ValidationError('No text is specified for page to save.')
        if not content.title:
            raise ValidationError(
                'No title is specified for page to save text to.')
        if content.read_only:
            raise BotDisallowed('Page "{}" excludes this bot; not saving.'
                                .format(content.title))
        params = {
            'action': 'edit',
            'title': content.title,
            'summary': summary,
            'text': content.text,
            'watchlist': 'nochange',
            'bot': 1,
            'token': self._token_for(content.title, 'edit'),
        }
        params['minor' if minor else 'notminor'] = 1
        if page.revision is not None and page.revision.timestamp is not None:
            params['basetimestamp'] = page.revision.timestamp.strftime(
                TIMESTAMP_FORMAT)
        if page.last_load_time is not None:
            start = page.last_load_time + timedelta(
                seconds=self.info.time_offset_seconds)
            params['starttimestamp'] = start.strftime(TIMESTAMP_FORMAT)

        self._throttle()
        LOG.debug('Saving %s', content.title)
        data = self.request(_post=True, _raise=False, **params)
        if 'error' in data:
            code = data['error'].get('code')
            if code == 'editconflict':
                raise EditConflict('Edit conflict occurred while trying to '
                                   'save page "{}".'.format(content.title))
            if code == 'noedit':
                raise InsufficientRights('Insufficient rights to edit page '
                                         '"{}".'.format(content.title))
            raise_for_error(data, 'Failed to save page "{}"'.format(
                content.title))
        if 'captcha' in data.get('edit', {}):
            raise BotDisallowed('Captcha required to save page "{}".'.format(
                content.title))

        self.last_write_time = time.time()
        page.last_load_time = None
        if page.revision is not None:
            page.revision = page.revision._replace(timestamp=None)
        LOG.info('Saved %s', content.title)
        return data.get('edit', {})

    def create_page(self, content, summary=''):
        """Save a new page from a PageContent and return it."""
        page = Page(content=content)
        self.save_page(page, summary, minor=False)
        return page

    def undo_last_edits(self, page, summary='', minor=True):
        """Restore the page as it was before its last editor's run of
        edits. Return False if every revision is by that editor.
        """
        if not page.title:
            raise ValidationError('No title is specified for page to revert.')
        limit = 50
        while limit <= 5000:
            history = self.get_page_history(page.title, limit)
            if not history:
                return False
            last_editor = history[0].user
            for revision in history:
                if revision.user != last_editor:
                    previous = self.get_page_by_revision_id(revision.id)
                    if previous is None:
                        return False
                    page.content.text = previous.content.text
                    self.save_page(page, summary, minor)
                    return True
            if len(history) < limit:
                break
            limit *= 10
        return False

    def revert_page(self, page, revid=None, summary='', minor=True):
        """Restore revision ``revid`` of a page, or the one before the
        current revision if ``revid`` is None.

        Return False if there is nothing to restore.
        """
        if not page.title:
            raise ValidationError('No title is specified for page to revert.')
        if revid is None:
            history = self.get_page_history(page.title, 2)
            if len(history) != 2:
                return False
            revid = history[1].id
        previous = self.get_page_by_revision_id(revid)
        if previous is None or previous.title != page.title:
            return False
        page.content.text = previous.content.text
        self.save_page(page, summary, minor)
        return True

    def delete_page(self, page, reason=''):
        """Delete a page."""
        if not page.title:
            raise ValidationError('No title is specified for page to delete.')
        token = self._token_for(page.title, 'delete', must_exist=True)
        data = self.request(_post=True, _raise=False, action='delete',
                            title=page.title, reason=reason, token=token)
        raise_for_error(data, 'Failed to delete page "{}"'.format(page.title))
        LOG.info('Deleted %s', page.title)

    def rename_page(self, page, new_title, reason='', rename_talk_page=False,
                    rename_subpages=False):
        """Move a page to ``new_title``, and optionally its talk page and
        subpages with it.
        """
        if not page.title:
            raise ValidationError('No title is specified for page to rename.')
        new_title = format_title(new_title)
        token = self._token_for(page.title, 'move', must_exist=True)
        data = self.request(_post=True, _raise=False, **{
            'action': 'move',
            'from': page.title,
            'to': new_title,
            'reason': reason,
            'movetalk': 1 if rename_talk_page else None,
            'movesubpages': 1 if rename_subpages else None,
            'token': token,
        })
        raise_for_error(data, 'Failed to rename page "{}" to "{}"'.format(
            page.title, new_title))
        LOG.info('Renamed %s to %s', page.title, new_title)
        page.content.title = new_title

    def protect_page(self, page, edit_mode, move_mode, cascade=False,
                     expiry=None, reason=''):
        """Protect a page.

        ``edit_mode`` and ``move_mode`` are 0 (anyone), 1 (autoconfirmed
        users) or 2 (sysops). ``expiry`` is a datetime in the future
        (naive values are taken as UTC) or None for no expiry.
        """
        if not page.title:
            raise ValidationError('No title is specified for page to protect.')
        if edit_mode not in PROTECTION_LEVELS:
            raise ValidationError('Invalid edit protection mode: {}.'.format(
                edit_mode))
        if move_mode not in PROTECTION_LEVELS:
            raise ValidationError('Invalid move protection mode: {}.'.format(
                move_mode))
        if expiry is None:
            until = 'infinite'
        else:
            if expiry.tzinfo is None:
                expiry = expiry.replace(tzinfo=timezone.utc)
            if expiry <= datetime.now(timezone.utc):
                raise ValidationError(
                    'Protection expiry date must be in the future.')
            until = expiry.strftime('%Y%m%d%H%M%S')
        token = self._token_for(page.title, 'protect', must_exist=True)
        data = self.request(
            _post=True, _raise=False, action='protect', title=page.title,
            protections='edit={}|move={}'.format(
                PROTECTION_LEVELS[edit_mode], PROTECTION_LEVELS[move_mode]),
            cascade=1 if cascade else None, expiry=until + '|' + until,
            reason=reason, watchlist='nochange', token=token)
        raise_for_error(data, 'Failed to protect page "{}"'.format(page.title))
        LOG.info('Protected %s', page.title)

    def purge(self, title):
        """Purge the server cache of a page."""
        data = self.post_request(action='purge', titles=format_title(title))
        return data.get('purge', [])

    # watchlist

    @_CachedAttribute
    def watchlist(self):
        """The titles on the account's watchlist; loaded on first use."""
        return self.get_watchlist()

    def get_watchlist(self):
        """Load the titles on the account's watchlist."""
        body = self.client.get(self.index_path,
                               params={'title': 'Special:Watchlist/edit'})
        return [format_title(html.unescape(match.group(1))) for match
                in self.info.regexes.title_link_shown.finditer(body)]

    def _watch_token(self, title):
        token = self.meta.tokens('watch')
        if token:
            return token
        token = self.get_security_tokens(title, 'watch').get('watchtoken')
        if not token:
            raise InsufficientRights(
                'Insufficient rights to watch page "{}".'.format(title))
        return token

    def watch_page(self, page):
        """Add a page to the watchlist."""
        if not page.title:
            raise ValidationError('No title is specified for page to watch.')
        token = self._watch_token(page.title)
        data = self.request(_post=True, _raise=False, action='watch',
                            titles=page.title, token=token)
        raise_for_error(data, 'Failed to watch page "{}"'.format(page.title))
        page.watched = True
        if page.title not in self.watchlist:
            self.watchlist.append(page.title)

    def unwatch_page(self, page):
        """Remove a page from the watchlist."""
        if not page.title:
            raise ValidationError('No title is specified for page to unwatch.')
        token = self._watch_token(page.title)
        data = self.request(_post=True, _raise=False, action='watch',
                            unwatch=1, titles=page.title, token=token)
        raise_for_error(data, 'Failed to unwatch page "{}"'.format(page.title))
        page.watched = False
        self.watchlist[:] = [title for title in self.watchlist
                             if title != page.title]

    # files

    def download_image(self, title, path):
        """Download the file behind a ``File:`` page to ``path``."""
        title = format_title(title)
        page_html = self.get_page_html(title)
        if page_html is None:
            raise NotFound('Image "{}" doesn\'t exist.'.format(title))
        for pattern in _FILE_LINKS:
            match = pattern.search(page_html)
            if match is not None:
                break
        else:
            raise NotFound('Image "{}" doesn\'t exist.'.format(title))
        url = urljoin(self.address + '/', html.unescape(match.group(1)))
        self.client.download_file(url, path)

    #pylint: disable=redefined-builtin
    def upload_image(self, title, path, description='', license='',
                     copy_status='', source=''):
        """Upload a local file as ``title`` through Special:Upload and
        return the new file page.
        """
        if not path or not os.path.isfile(path):
            raise ValidationError('Image file "{}" doesn\'t exist.'.format(
                path))
        if not title:
            raise ValidationError('No title is specified for the image.')
        filename = os.path.basename(path)
        if len(os.path.splitext(filename)[0]) < 3:
            raise ValidationError(
                'Name of file "{}" must contain at least 3 characters '
                '(excluding extension).'.format(filename))
        title = format_title(title)
        token = self.get_security_tokens(title, 'edit').get('edittoken')
        if not token:
            raise InsufficientRights(
                'Insufficient rights to upload "{}".'.format(title))
        namespaces = self.info.namespaces
        target = capitalize(namespaces.remove_ns_prefix(title, 6))
        with open(path, 'rb') as fileobj:
            file_bytes = fileobj.read()
        fields = {
            'wpIgnoreWarning': '1',
            'wpDestFile': target,
            'wpUploadAffirm': '1',
            'wpWatchthis': '0',
            'wpEditToken': token,
            'wpUploadCopyStatus': copy_status,
            'wpUploadSource': source,
            'wpUpload': 'Upload file',
            'wpLicense': license,
            'wpUploadDescription': description,
        }
        url = (self.index_path + '?title='
               + url_encode(namespaces.get_ns_prefix(-1) + 'Upload'))
        body = self.client.post_multipart(url, file_bytes, filename, fields)
        if (html.escape(target) not in body
                and html.escape(target, quote=False) not in body):
            raise WikiError('Failed to upload "{}".'.format(title))
        error = self.get_mediawiki_messages(['uploaderror']).get('uploaderror')
        if error and error in body:
            raise WikiError('Failed to upload "{}": {}'.format(title, error))
        LOG.info('Uploaded %s as %s', filename, target)
        return self.get_page_by_title(namespaces.get_ns_prefix(6) + target)

    # HTML

    def get_page_html(self, title):
        """Return the rendered HTML of a page, or None if it doesn't exist."""
        try:
            return self.client.get(self.index_path,
                                   params={'title': format_title(title)})
        except requests.HTTPError as exc:
            if exc.response is not None and exc.response.status_code == 404:
                return None
            raise

    def get_edit_form(self, title):
        """Scrape the hidden fields of a page's edit form."""
        body = self.client.get(self.index_path, params={
            'title': format_title(title),
            'action': 'edit',
        })
        regexes = self.info.regexes
        fields = {}
        for name, pattern in (('wpEditToken', regexes.edit_token),
                              ('wpEdittime', regexes.edit_time),
                              ('wpStarttime', regexes.start_time),
                              ('baseRevId', regexes.base_rev_id)):
            match = pattern.search(body)
            fields[name] = (match.group(1) or match.group(2)) if match else None
        return fields

    def get_wikimedia_projects(self, official_only=True):
        """List the host names of Wikimedia projects from Special:SiteMatrix."""
        body = self.client.get(SITE_MATRIX)
        end = ('<a id="total" name="total">' if official_only
               else 'class="printfooter"')
        block = get_substring(body, '<a id="aa" name="aa">', end)
        return re.findall(r'<a href="(?:https?:)?(?://)?([^"/]+)', block)

    # links

    def _page_prop(self, title, prop, **params):
        data = self.request(action='query', prop=prop,
                            titles=format_title(title), **params)
        pages = data.get('query', {}).get('pages', {})
        return next(iter(pages.values()), {}).get(prop, [])

    def get_all_categories(self, title):
        """List every category of a page, hidden ones and those added by
        templates included.
        """
        return [category['title'] for category
                in self._page_prop(title, 'categories', cllimit='max')]

    def get_sisterwiki_links(self, title):
        """List the interwiki links of a page as ``prefix:title``."""
        return [link['prefix'] + ':' + link['*'] for link
                in self._page_prop(title, 'iwlinks', iwlimit='max')]

    def get_interlanguage_links(self, title):
        """List the language links of a page as ``lang:title``."""
        return [link['lang'] + ':' + link['*'] for link
                in self._page_prop(title, 'langlinks', lllimit='max')]

    def get_wikidata_links(self, title):
        """List the language codes of the Wikidata language links shown on
        a page.
        """
        page_html = self.get_page_html(title) or ''
        start = '<li class="interlanguage-link '
        if start not in page_html:
            return []
        block = get_substring(page_html, start, '</ul>')
        return re.findall(r'interlanguage-link interwiki-([^" ]+)', block)

    def get_page_links(self, page):
        """List the pages a page links to: no files, categories, interwiki
        or language links, no section anchors.
        """
        excluded = set(self.get_sisterwiki_links(page.title))
        excluded.update(self.get_interlanguage_links(page.title))
        links = []
        for link in page.content.links():
            link = link.lstrip(':').split('#', 1)[0].strip()
            if not link or link in excluded:
                continue
            link = format_title(link)
            if link not in links:
                links.append(link)
        return links

    # Wikidata

    def get_wikidata_item(self, site, title):
        """Return the Wikidata item for page ``title`` of ``site`` (e.g.
        ``enwiki``), or None if there is none.
        """
        body = self.client.get(WIKIDATA_API, params={
            'action': 'wbgetentities',
            'format': 'json',
            'sites': site,
            'titles': title,
            'normalize': 1,
            'props': 'info|sitelinks',
        })
        data = self.parsers.deserialize(body, dict)
        raise_for_error(data)
        for entity_id, entity in data.get('entities', {}).items():
            if entity_id.startswith('-') or 'missing' in entity:
                return None
            return WikidataItem(entity_id, {
                link['site']: link['title']
                for link in entity.get('sitelinks', {}).values()
            })
        return None

    def merge_wikidata_items(self, from_id, to_id):
        """Merge Wikidata item ``from_id`` into ``to_id``."""
        body = self.client.get(WIKIDATA_API, params={
            'action': 'query',
            'meta': 'tokens',
            'format': 'json',
        })
        tokens = self.parsers.deserialize(body, dict).get('query', {})
        token = tokens.get('tokens', {}).get('csrftoken')
        if not token:
            raise InsufficientRights('Insufficient rights to merge {} into {}.'
                                     .format(from_id, to_id))
        body = self.client.post(WIKIDATA_API, data={
            'action': 'wbmergeitems',
            'format': 'json',
            'fromid': from_id,
            'toid': to_id,
            'bot': 1,
            'token': token,
        })
        data = self.parsers.deserialize(body, dict)
        raise_for_error(data, 'Failed to merge {} into {}'.format(from_id,
                                                                  to_id))
        return data

    # messages and generic queries

    @_CachedAttribute
    def messages(self):
        """The customised interface messages of the wiki, by name."""
        return self.get_mediawiki_messages()

    def get_mediawiki_messages(self, names=None):
        """Return interface messages by name: all customised ones, or just
        ``names``. Messages the wiki doesn't know are left out.
        """
        data = self.request(action='query', meta='allmessages',
                            amenableparser=1, amcustomised='all',
                            ammessages='|'.join(names) if names else None)
        return {message['name']: message.get('*', '')
                for message in data.get('query', {}).get('allmessages', ())
                if 'missing' not in message}

    def get_api_query_result(self, query, params=None, limit=500,
                             fetch_rate=500):
        """Run a list or prop query (e.g. ``'list=allpages'``), following
        continuations until ``limit`` results are in. Return the result
        dicts.
        """
        if not query or '=' not in query:
            raise ValidationError('Malformed query "{}"; expected e.g. '
                                  '"list=allpages".'.format(query))
        if query not in API_QUERIES:
            raise ValidationError('The query "{}" is not supported.'.format(
                query))
        if limit <= 0:
            raise ValidationError('Limit must be positive.')
        prefix, key, _ = API_QUERIES[query]
        module, name = query.split('=', 1)
        request = {'action': 'query', module: name,
                   prefix + 'limit': min(limit, fetch_rate)}
        request.update(params or {})
        results = []
        last_cont = {}
        while 1:
            request.update(last_cont)
            data = self.request(_post=True, **request)
            found = data.get('query', {})
            if module == 'prop':
                for page in found.get('pages', {}).values():
                    results.extend(page.get(key, ()))
            else:
                results.extend(found.get(key, ()))
            if len(results) >= limit or 'continue' not in data:
                break
            last_cont = data['continue']
        return results[:limit]

    def get_page_titles_from_query(self, query, params=None, limit=500,
                                   fetch_rate=500):
        """Same as get_api_query_result, but return only the titles."""
        results = self.get_api_query_result(query, params, limit, fetch_rate)
        target = API_QUERIES[query][2]
        return [result[target] for result in results if target in result]
