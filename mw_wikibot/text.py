"""
String helpers shared by the document model and the wiki client.
"""
import html
import re
from urllib.parse import quote
from .excs import ValidationError

__all__ = [
    'format_title',
    'capitalize',
    'uncapitalize',
    'first_letter_pattern',
    'get_substring',
    'match_positions',
    'count_matches',
    'html_decode',
    'url_encode',
]

#: Longest run of characters percent-encoded in one go.
URL_ENCODE_CHUNK = 32766

def format_title(title):
    """Normalize a page title: no leading colons, spaces for underscores."""
    if not title:
        raise ValidationError('No title specified.')
    return title.lstrip(':').replace('_', ' ')

def capitalize(text):
    """Upper-case the first character only."""
    if not text:
        return text
    return text[0].upper() + text[1:]

def uncapitalize(text):
    """Lower-case the first character only."""
    if not text:
        return text
    return text[0].lower() + text[1:]

def first_letter_pattern(title):
    """Return a regex for ``title`` whose first letter matches in either
    case and whose spaces also match underscores.
    """
    if not title:
        raise ValidationError('No title specified.')
    first = title[0]
    if first.upper() != first.lower():
        head = '[' + re.escape(first.upper()) + re.escape(first.lower()) + ']'
    else:
        head = re.escape(first)
    rest = ''.join('[_ ]' if char in ' _' else re.escape(char)
                   for char in title[1:])
    return head + rest

def get_substring(text, start_tag, end_tag,
                  remove_start=False, remove_end=False, strict=True):
    """Return the part of ``text`` from ``start_tag`` to ``end_tag``.

    If ``strict`` is False a missing tag means "from the beginning" or
    "to the end" instead of an empty result.
    """
    if not text:
        return ''
    if start_tag:
        start = text.find(start_tag)
        if start == -1:
            if strict:
                return ''
            start = 0
        elif remove_start:
            start += len(start_tag)
    else:
        start = 0
    if end_tag:
        end = text.find(end_tag, start)
        if end == -1:
            if strict:
                return ''
            end = len(text)
        elif not remove_end:
            end += len(end_tag)
    else:
        end = len(text)
    return text[start:end]

def match_positions(text, needle, ignore_case=False):
    """List every index at which ``needle`` occurs in ``text``."""
    if not text or not needle:
        return []
    flags = re.I if ignore_case else 0
    return [m.start() for m in re.finditer(re.escape(needle), text, flags)]

def count_matches(text, needle, ignore_case=False):
    """Count non-overlapping occurrences of ``needle`` in ``text``."""
    return len(match_positions(text, needle, ignore_case))

def html_decode(text):
    """Decode HTML entities."""
    return html.unescape(text) if text else text

def url_encode(text):
    """Percent-encode everything but unreserved characters.

    Long strings are encoded in chunks, which gives the same result as
    encoding them whole.
    """
    if not text:
        return ''
    return ''.join(quote(text[i:i + URL_ENCODE_CHUNK], safe='-_.~')
                   for i in range(0, len(text), URL_ENCODE_CHUNK))
