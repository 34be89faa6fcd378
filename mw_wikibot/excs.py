"""
mw_wikibot.excs - Exceptions raised by the bot framework.

Every exception is a ``WikiError`` carrying a ``kind`` from ``ErrorKind``,
so callers can branch on what went wrong instead of on the message text:

.. code-block:: python

    try:
        wiki.save_page(page, 'summary')
    except mw.WikiError as exc:
        if exc.kind is mw.ErrorKind.CONFLICT:
            page = wiki.get_page_by_title(page.title)
        else:
            raise

To catch an edit conflict directly:

.. code-block:: python

    try:
        wiki.save_page(page, 'summary')
    except mw.EditConflict:
        # reload and try again
        ...

API error codes are available as attributes of ``WikiError``:

.. code-block:: python

    try:
        wiki.save_page(page, 'summary')
    except mw.WikiError.protectedpage as exc:
        print('Page is protected:', exc)
"""
from enum import Enum

__all__ = [
    'ErrorKind',
    'WikiError',
    'ValidationError',
    'TransientError',
    'InsufficientRights',
    'LoginFailed',
    'EditConflict',
    'BotDisallowed',
    'NotFound',
    'ConfigurationError',
    'WikiWarning',
    'raise_for_error',
]

class ErrorKind(Enum):
    """What kind of failure a WikiError represents."""
    VALIDATION = 'validation'
    TRANSIENT = 'transient-network'
    RIGHTS = 'rights'
    CONFLICT = 'conflict'
    DISALLOWED = 'policy-disallowed'
    NOT_FOUND = 'not-found'
    CONFIGURATION = 'configuration'
    SITE = 'site'

class _MetaGetattr(type):
    """Metaclass to provide __getattr__ on a class."""
    def __getattr__(cls, name):
        if name.startswith('_'):
            raise AttributeError(name)
        setattr(cls, name, type(name, (cls,), {}))
        return getattr(cls, name)

#pylint: disable=too-few-public-methods
class WikiError(Exception, metaclass=_MetaGetattr):
    """An error raised while working with the wiki.

    Subclasses named after API error codes are created on first access,
    e.g. ``WikiError.protectedpage``; they are of kind ``SITE``.
    """
    kind = ErrorKind.SITE

    @property
    def code(self):
        """Return the exception code."""
        return type(self).__name__

class ValidationError(WikiError, ValueError):
    """A required argument was missing or out of range.

    Always raised before any request is sent.
    """
    kind = ErrorKind.VALIDATION

class TransientError(WikiError):
    """The server stayed busy or failing for every allowed retry."""
    kind = ErrorKind.TRANSIENT

    def __init__(self, message, response=None):
        super().__init__(message)
        self.response = response

class InsufficientRights(WikiError):
    """The account lacks the rights (or the token) for an action."""
    kind = ErrorKind.RIGHTS

class LoginFailed(InsufficientRights):
    """The wiki rejected the credentials."""

class EditConflict(WikiError):
    """The page changed after it was last loaded."""
    kind = ErrorKind.CONFLICT

class BotDisallowed(WikiError):
    """The bot may not edit: exclusion markup, or a captcha was demanded."""
    kind = ErrorKind.DISALLOWED

class NotFound(WikiError):
    """The page (or file) needed by a write does not exist."""
    kind = ErrorKind.NOT_FOUND

class ConfigurationError(WikiError):
    """The session could not be set up."""
    kind = ErrorKind.CONFIGURATION

# API codes with a dedicated kind
WikiError.editconflict = EditConflict
WikiError.noedit = InsufficientRights
WikiError.permissiondenied = InsufficientRights
WikiError.missingtitle = NotFound

class WikiWarning(UserWarning, metaclass=_MetaGetattr):
    """The API sent a warning in the response."""

def raise_for_error(data, message=None):
    """Raise ``WikiError.<code>`` if ``data`` holds an API error block.

    ``message`` replaces the server's text, which is appended to it.
    """
    if 'error' not in data:
        return
    error = data['error']
    code = error.get('code', 'unknown')
    info = error.get('info', '')
    if message is None:
        message = '{}: {}'.format(code, info)
    else:
        message = '{} ({}: {})'.format(message, code, info)
    raise getattr(WikiError, code)(message)
