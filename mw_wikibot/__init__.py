"""
A framework for writing MediaWiki bots.

Finds a wiki's API, logs in, and edits pages politely: every write is
spaced out, carries ``maxlag``, and backs off while the servers are busy.
Page text can be worked on structurally (templates, categories, links,
redirects, sections) with regexes built from the wiki's own namespace
names and magic words.

Requires the ``requests`` library.

http://www.mediawiki.org/

Installation
============

To install the latest development version::

    git clone https://github.com/Kenny2github/mw-api-client.git
    cd mw-api-client
    pip install -e .

To run the tests::

    pip install -e .[test]
    pytest

Example Usage
=============

.. code-block:: python

    import mw_wikibot as mw

Connect and log in:

.. code-block:: python

    wp = mw.connect("https://en.wikipedia.org", "MyCoolBot", password,
                    user_agent="MyCoolBot/0.0.0 (mycoolbot@example.org)")

Edit a page:

.. code-block:: python

    sandbox = wp.get_page_by_title("User:MyCoolBot/sandbox")

    sandbox.content.text += "\\n This is a test!"
    wp.save_page(sandbox, "Made a test edit")

Pages whose text excludes the bot (``{{nobots}}``, ``{{bots|deny=...}}``)
are read-only and raise ``BotDisallowed`` instead of being saved.

Tidy up categories and templates:

.. code-block:: python

    page = wp.get_page_by_title("Foo")
    page.content.remove_from_category("Category:Stubs")
    page.content.add_to_category("Bars")
    page.content.set_template_parameter("Infobox person", "name", "Foo")
    page.content.remove_template("Cleanup")
    wp.save_page(page, "Tidying up")

List pages in a category:

.. code-block:: python

    for title in wp.get_page_titles_from_query(
            "list=categorymembers", {"cmtitle": "Category:Redirects"}):
        print(title)

Handle failures by kind:

.. code-block:: python

    try:
        wp.save_page(page, "summary")
    except mw.EditConflict:
        page = wp.get_page_by_title(page.title)
    except mw.WikiError as exc:
        print(exc.kind, exc)

Log messages go to the ``mw_wikibot`` logger; call
``logging.basicConfig(level=logging.INFO)`` to see them.

Based on Kenny2github's mw-api-client.

MIT Licensed.
"""
import logging

__version__ = '1.0.0'

from .wiki import Wiki, connect, SAVE_DELAY, MAXLAG, RETRIES
from .page import Page, PageContent, Section
from .excs import (ErrorKind, WikiError, WikiWarning, ValidationError,
                   TransientError, InsufficientRights, LoginFailed,
                   EditConflict, BotDisallowed, NotFound, ConfigurationError)
from .client import HttpClient
from .parsers import ParserRegistry, DEFAULT_PARSERS
from .namespaces import NamespaceDictionary
from .siteinfo import SiteInformation, RegexSet
from .misc import *

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    'connect',
    'Wiki',
    'SAVE_DELAY',
    'MAXLAG',
    'RETRIES',
    'Page',
    'PageContent',
    'Section',
    'ErrorKind',
    'WikiError',
    'WikiWarning',
    'ValidationError',
    'TransientError',
    'InsufficientRights',
    'LoginFailed',
    'EditConflict',
    'BotDisallowed',
    'NotFound',
    'ConfigurationError',
    'HttpClient',
    'ParserRegistry',
    'DEFAULT_PARSERS',
    'NamespaceDictionary',
    'SiteInformation',
    'RegexSet',
    'Revision',
    'UserContrib',
    'RecentChange',
    'WikidataItem',
    'Compare',
    'Meta',
]
