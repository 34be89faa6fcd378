"""Test the HTTP transport."""
import os
import tempfile
from unittest import TestCase, mock
import requests
import mw_wikibot as mw

URL = 'https://example.org/w/api.php'

def make_response(status=200, body=b'', headers=None):
    """Return a requests.Response that never touches the network."""
    response = requests.Response()
    response.status_code = status
    response._content = body #pylint: disable=protected-access
    response._content_consumed = True #pylint: disable=protected-access
    response.headers.update(headers or {})
    response.url = URL
    return response

class TestClient(TestCase):
    """Test HttpClient."""
    def setUp(self):
        self.client = mw.HttpClient(retries=3)
        patcher = mock.patch('mw_wikibot.client.time')
        self.time = patcher.start()
        self.addCleanup(patcher.stop)

    def send(self, *responses):
        """Patch the session to answer with ``responses`` in order."""
        patcher = mock.patch.object(self.client._session, 'request',
                                    side_effect=list(responses))
        self.addCleanup(patcher.stop)
        return patcher.start()

    def test_get(self):
        """Test a plain GET."""
        request = self.send(make_response(body=b'ok'))
        self.assertEqual(self.client.get(URL, {'a': 1}), 'ok')
        args, kwargs = request.call_args
        self.assertEqual(args, ('GET', URL))
        self.assertEqual(kwargs['params'], {'a': 1})
        self.time.sleep.assert_not_called()
    def test_retries_then_success(self):
        """Test that as many 503s as allowed retries still succeed."""
        request = self.send(make_response(503), make_response(503),
                            make_response(503), make_response(body=b'ok'))
        self.assertEqual(self.client.get(URL), 'ok')
        self.assertEqual(request.call_count, 4)
        self.assertEqual(self.time.sleep.call_count, 3)
        self.time.sleep.assert_called_with(60)
    def test_too_many_failures(self):
        """Test that one failure more than allowed is a TransientError."""
        request = self.send(*[make_response(503) for _ in range(4)])
        with self.assertRaises(mw.TransientError) as caught:
            self.client.get(URL)
        self.assertIs(caught.exception.kind, mw.ErrorKind.TRANSIENT)
        self.assertEqual(caught.exception.response.status_code, 503)
        self.assertEqual(request.call_count, 4)
    def test_retry_after(self):
        """Test that the server's Retry-After delay is honoured."""
        self.send(make_response(200, headers={'Retry-After': '7'}),
                  make_response(body=b'ok'))
        self.assertEqual(self.client.get(URL), 'ok')
        self.time.sleep.assert_called_once_with(7)
    def test_no_retry_on_client_error(self):
        """Test that a 404 is raised at once."""
        request = self.send(make_response(404))
        with self.assertRaises(requests.HTTPError):
            self.client.get(URL)
        self.assertEqual(request.call_count, 1)
    def test_post_maxlag(self):
        """Test that every POST carries maxlag first."""
        self.client.maxlag = 2
        request = self.send(make_response(body=b'{}'))
        self.client.post(URL, data={'action': 'edit'})
        data = request.call_args[1]['data']
        self.assertEqual(data, {'maxlag': 2, 'action': 'edit'})
        self.assertEqual(list(data)[0], 'maxlag')
    def test_undecodable(self):
        """Test that invalid UTF-8 is replaced."""
        self.send(make_response(body=b'caf\xe9'))
        self.assertEqual(self.client.get(URL), 'caf�')
    def test_unfollowed_redirect(self):
        """Test that a redirect is not followed when saving cookies."""
        request = self.send(make_response(
            302, headers={'Location': 'https://example.org/'}))
        self.assertEqual(self.client.get_and_save_cookies(URL), '')
        self.assertFalse(request.call_args[1]['allow_redirects'])
    def test_cookies(self):
        """Test that only the cookie-saving calls keep cookies."""
        response = make_response(body=b'{}')
        response.cookies.set('session', 'abc', domain='.example.org',
                             path='/')
        self.send(response)
        self.client.get(URL)
        self.assertEqual(len(self.client.cookies), 0)

        response = make_response(body=b'{}')
        response.cookies.set('session', 'abc', domain='.example.org',
                             path='/')
        self.send(response)
        self.client.get_and_save_cookies(URL)
        self.assertEqual([cookie.domain for cookie in self.client.cookies],
                         ['example.org'])
    def test_cookies_sent(self):
        """Test that the jar goes with every request."""
        request = self.send(make_response(body=b'{}'))
        self.client.get(URL)
        self.assertIs(request.call_args[1]['cookies'], self.client.cookies)
    def test_multipart(self):
        """Test that files are sent with the form fields."""
        request = self.send(make_response(body=b'done'))
        self.client.post_multipart(URL, b'PNG', 'a.png', {'wpDestFile': 'A'})
        kwargs = request.call_args[1]
        self.assertEqual(kwargs['files'], {
            'wpUploadFile': ('a.png', b'PNG', 'application/octet-stream')})
        self.assertEqual(list(kwargs['data']), ['maxlag', 'wpDestFile'])
    def test_download(self):
        """Test that a download is saved byte for byte."""
        request = self.send(make_response(body=b'\x89PNG\x00'))
        with tempfile.TemporaryDirectory() as folder:
            path = os.path.join(folder, 'a.png')
            self.client.download_file(URL, path)
            with open(path, 'rb') as fileobj:
                self.assertEqual(fileobj.read(), b'\x89PNG\x00')
        kwargs = request.call_args[1]
        self.assertTrue(kwargs['stream'])
        self.assertEqual(kwargs['headers'], {'Accept-Encoding': 'identity'})
    def test_no_url(self):
        """Test that a missing URL is rejected before sending."""
        request = self.send()
        with self.assertRaises(mw.ValidationError):
            self.client.get('')
        request.assert_not_called()
