"""
HTTP transport for the wiki client.

``HttpClient`` wraps a ``requests`` session with the behaviour MediaWiki
expects from a well-mannered bot: every POST carries ``maxlag``, and a
busy (``Retry-After``) or failing (5xx) server is retried after the delay
it asks for.
"""
import itertools
import logging
import time
from urllib.parse import urlparse
import requests
from requests.cookies import RequestsCookieJar
from .excs import TransientError, ValidationError

__all__ = ['HttpClient']

LOG = logging.getLogger(__name__)

DEFAULT_USER_AGENT = 'mw_wikibot/1.0.0, python-requests/' + requests.__version__
RETRY_STATUSES = frozenset((500, 502, 503, 504))
DEFAULT_RETRY_DELAY = 60

class HttpClient:
    """Send requests to a wiki. All methods return the body as text.

    ``maxlag`` is sent with every POST; ``retries`` is how many times a
    single request is retried while the server is busy or failing.
    """
    def __init__(self, user_agent=None, maxlag=5, retries=3):
        """Initialize the client with a fresh session and an empty jar."""
        self.maxlag = maxlag
        self.retries = retries
        self.cookies = RequestsCookieJar()
        self._session = requests.Session()
        self._session.headers.update({
            'User-Agent': user_agent or DEFAULT_USER_AGENT,
            'Accept-Encoding': 'gzip, deflate',
            'Cache-Control': 'no-cache, must-revalidate',
        })

    def __repr__(self):
        """Represent the client."""
        return '<HttpClient maxlag={} retries={}>'.format(self.maxlag,
                                                          self.retries)

    def get(self, url, params=None):
        """GET ``url``."""
        return self._request('GET', url, params=params)

    def post(self, url, data=None, params=None):
        """POST form ``data`` to ``url``."""
        return self._request('POST', url, params=params,
                             data=self._with_maxlag(data))

    def get_and_save_cookies(self, url, params=None, allow_redirects=False):
        """GET ``url`` and keep the cookies the server sets."""
        return self._request('GET', url, params=params, save_cookies=True,
                             allow_redirects=allow_redirects)

    def post_and_save_cookies(self, url, data=None, params=None,
                              allow_redirects=False):
        """POST to ``url`` and keep the cookies the server sets."""
        return self._request('POST', url, params=params,
                             data=self._with_maxlag(data), save_cookies=True,
                             allow_redirects=allow_redirects)

    #pylint: disable=too-many-arguments
    def post_multipart(self, url, file_bytes, filename, fields,
                       file_field='wpUploadFile'):
        """POST ``fields`` and a file as multipart/form-data."""
        files = {file_field: (filename, file_bytes,
                              'application/octet-stream')}
        return self._request('POST', url, data=self._with_maxlag(fields),
                             files=files)

    def download_file(self, url, path):
        """Save the resource at ``url`` to ``path``, byte for byte."""
        response = self._send('GET', url, stream=True,
                              headers={'Accept-Encoding': 'identity'})
        with response, open(path, 'wb') as fileobj:
            for chunk in response.iter_content(chunk_size=8192):
                fileobj.write(chunk)

    def _with_maxlag(self, data):
        result = {'maxlag': self.maxlag}
        result.update(data or {})
        return result

    def _request(self, method, url, **kwargs):
        response = self._send(method, url, **kwargs)
        if response is None:
            return ''
        return response.content.decode('utf-8', 'replace')

    def _send(self, method, url, save_cookies=False, allow_redirects=True,
              **kwargs):
        """Send a request, retrying while the server is busy or failing.

        Return None for a redirect that was not followed.
        """
        if not url:
            raise ValidationError('No URL specified.')
        delay = DEFAULT_RETRY_DELAY
        for attempt in itertools.count():
            response = self._session.request(
                method, url, cookies=self.cookies,
                allow_redirects=allow_redirects, **kwargs)
            # only the jar may keep cookies between requests
            self._session.cookies.clear()
            busy = 'Retry-After' in response.headers
            if not busy and response.status_code not in RETRY_STATUSES:
                break
            response.close()
            if attempt >= self.retries:
                raise TransientError(
                    '{} {} still failing after {} retries (HTTP {}).'.format(
                        method, url, self.retries, response.status_code),
                    response)
            try:
                requested = int(response.headers.get('Retry-After', 0))
            except ValueError:
                requested = 0
            if requested > 0:
                delay = requested
            LOG.warning('%s %s: HTTP %d%s, retrying in %d seconds'
                        ' (retry %d of %d)', method, url,
                        response.status_code, ' (busy)' if busy else '',
                        delay, attempt + 1, self.retries)
            time.sleep(delay)
        if not allow_redirects and response.is_redirect:
            return None
        response.raise_for_status()
        if save_cookies:
            self._save_cookies(response, url)
        return response

    def _save_cookies(self, response, url):
        host = urlparse(url).hostname
        for cookie in response.cookies:
            if cookie.domain.startswith('.') and cookie.domain[1:] == host:
                cookie.domain = host
                cookie.domain_initial_dot = False
            self.cookies.set_cookie(cookie)
