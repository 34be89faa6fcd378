"""
Parse template calls into parameter dicts and format them back.

.. code-block:: python

    >>> parse_template('{{Infobox|Name|2=Bar}}')
    {'1': 'Name', '2': 'Bar'}
    >>> format_template('Infobox', {'1': 'Name', 'type': 'x'}, inline=True)
    '{{Infobox|Name|type = x}}'
"""
import re
from .excs import ValidationError

__all__ = [
    'mask_spans',
    'template_title',
    'parse_template',
    'format_template',
    'format_template_like',
]

def mask_spans(text, opening='{{', closing='}}', placeholder='_'):
    """Blank out every ``opening``...``closing`` span in ``text``.

    Spans are found by taking the right-most unmasked ``opening`` and the
    first ``closing`` after it, so inner spans are masked before the spans
    that contain them. An ``opening`` with no ``closing`` is masked on its
    own and not reported.

    Return the masked text (same length as ``text``) and the list of
    ``(start, stop)`` spans in the order they were found.
    """
    spans = []
    masked = text
    pos = masked.rfind(opening)
    while pos != -1:
        end = masked.find(closing, pos + len(opening))
        if end == -1:
            stop = pos + len(opening)
        else:
            stop = end + len(closing)
            spans.append((pos, stop))
        masked = masked[:pos] + placeholder * (stop - pos) + masked[stop:]
        pos = masked.rfind(opening)
    return masked, spans

def _strip_braces(template):
    template = template.strip()
    if template.startswith('{{') and template.endswith('}}'):
        template = template[2:-2]
    return template

def _mask_nested(template):
    return mask_spans(mask_spans(template)[0], '[[', ']]')[0]

def template_title(template):
    """Return the title part of a template call."""
    template = _strip_braces(template)
    bar = _mask_nested(template).find('|')
    return (template if bar == -1 else template[:bar]).strip()

def parse_template(template):
    """Parse the parameters of a template call into a dict.

    Nested templates and links are left alone. A parameter without a
    top-level ``=`` is positional and keyed by its 1-based position.
    Keys and values are stripped of surrounding whitespace.
    """
    if not template:
        raise ValidationError('No template specified.')
    template = _strip_braces(template)
    masked = _mask_nested(template)
    bars = [i for i, char in enumerate(masked) if char == '|']
    params = {}
    for ordinal, start in enumerate(bars, 1):
        stop = bars[ordinal] if ordinal < len(bars) else len(template)
        equals = masked.find('=', start + 1, stop)
        if equals == -1:
            params[str(ordinal)] = template[start + 1:stop].strip()
        else:
            key = template[start + 1:equals].strip()
            params[key] = template[equals + 1:stop].strip()
    return params

#pylint: disable=too-many-arguments
def format_template(title, params, inline=False, without_spaces=False,
                    padding=0):
    """Build a template call from a title and a parameter dict.

    ``inline`` keeps everything on one line; otherwise each parameter
    starts a line of its own. ``without_spaces`` drops the spaces around
    ``=``. ``padding`` right-pads keys to that width; -1 uses the length
    of the longest key. Inline calls and calls without spaces are never
    padded. A key equal to the parameter's position is written as a
    positional parameter.
    """
    if not title:
        raise ValidationError('No template title specified.')
    if inline or without_spaces:
        padding = 0
    if inline:
        separator = '|'
    else:
        separator = '\n|' if without_spaces else '\n| '
    equals = '=' if without_spaces else ' = '
    if padding == -1:
        padding = max((len(key) for key in params), default=0)
    result = '{{' + title
    for ordinal, (key, value) in enumerate(params.items(), 1):
        if key == str(ordinal):
            result += separator + value
        else:
            result += separator + key.ljust(padding) + equals + value
    if params and not inline:
        result += '\n'
    return result + '}}'

def format_template_like(title, params, reference):
    """Format a template the way ``reference`` (an existing call) is laid
    out.
    """
    reference = _strip_braces(reference)
    inline = '\n' not in reference
    without_spaces = not re.search(r' =|= ', reference)
    padding = -1 if re.search(r'\S {2,}=', reference) else 0
    return format_template(title, params, inline, without_spaces, padding)
