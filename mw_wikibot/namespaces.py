"""
This submodule contains the NamespaceDictionary.
"""
import re
from .excs import ValidationError

__all__ = ['NamespaceDictionary']

def _normalize(name):
    return name.replace('_', ' ').strip().casefold()

def _name_pattern(name):
    return ''.join('[ _]' if char in ' _' else re.escape(char)
                   for char in name)

class NamespaceDictionary:
    """Namespace indices and every name each one goes by on a site.

    Each index keeps its local name first, then the canonical (English)
    name when that differs, then any aliases.
    """
    def __init__(self, namespaces=None):
        """``namespaces`` maps an index to a ``(local, canonical)`` pair."""
        self._names = {}
        self._canonical = {}
        for index, (local, canonical) in (namespaces or {}).items():
            index = int(index)
            canonical = canonical or local
            self._names[index] = [local]
            if canonical != local:
                self._names[index].append(canonical)
            self._canonical[index] = canonical

    @classmethod
    def from_siteinfo(cls, namespaces, aliases=()):
        """Build the dictionary from ``siprop=namespaces|namespacealiases``
        results.
        """
        result = cls({
            ns['id']: (ns.get('*', ''), ns.get('canonical', ''))
            for ns in namespaces.values()
        })
        for alias in aliases:
            result.add_alias(alias['id'], alias['*'])
        return result

    def __repr__(self):
        """Represent the namespace dictionary."""
        return '<NamespaceDictionary of {} namespaces>'.format(len(self))

    def __len__(self):
        return len(self._names)

    def __iter__(self):
        return iter(sorted(self._names))

    def __contains__(self, index):
        return index in self._names

    def _lookup(self, index):
        try:
            return self._names[index]
        except KeyError:
            raise ValidationError('Unknown namespace index: {}.'.format(index))

    def names(self, index):
        """Return all the names of a namespace."""
        return list(self._lookup(index))

    def add_alias(self, index, alias):
        """Add an alias to a namespace."""
        names = self._lookup(int(index))
        if alias and alias not in names:
            names.append(alias)

    def get_all_ns_prefixes(self):
        """Return a regex alternation of every non-empty namespace name."""
        return '|'.join(_name_pattern(name)
                        for index in self
                        for name in self._names[index] if name)

    def get_ns_prefix(self, index):
        """Return the local prefix of a namespace, colon included.

        The main namespace has no prefix.
        """
        if index == 0:
            return ''
        return self._lookup(index)[0] + ':'

    def get_english_ns_prefix(self, index):
        """Return the canonical English prefix of a namespace."""
        if index == 0:
            return ''
        self._lookup(index)
        return self._canonical[index] + ':'

    def get_ns_prefixes(self, index):
        """Return a regex alternation of the names of one namespace."""
        return '|'.join(_name_pattern(name)
                        for name in self._lookup(index) if name)

    def get_namespace(self, title):
        """Return the index of the namespace ``title`` is in."""
        prefix, colon, _ = title.partition(':')
        if not colon or not prefix.strip():
            return 0
        prefix = _normalize(prefix)
        for index in self:
            if any(_normalize(name) == prefix for name in self._names[index]):
                return index
        return 0

    def remove_ns_prefix(self, title, index=0):
        """Strip the namespace prefix from ``title``.

        With ``index`` 0 any known prefix is removed; otherwise only a
        prefix of that namespace.
        """
        if index == 0:
            pattern = self.get_all_ns_prefixes()
        else:
            pattern = self.get_ns_prefixes(index)
        if not pattern:
            return title
        return re.sub(r'^\s*(?:' + pattern + r')\s*:\s*', '', title,
                      count=1, flags=re.I)

    def correct_ns_prefix(self, title):
        """Replace whatever prefix ``title`` uses with the local one."""
        index = self.get_namespace(title)
        if index == 0:
            return title
        return self.get_ns_prefix(index) + self.remove_ns_prefix(title, index)
