import re
from typing import Dict, NamedTuple, Optional

from loguru import logger

from .stringblock import StringBlock

_prefix_pattern = re.compile(r'[a-z]+', re.IGNORECASE | re.ASCII)


class Attribute(NamedTuple):
    prefix: Optional[str]
    name: str
    value: str

    def qualified_name(self) -> str:
        if self.prefix:
            return "{}:{}".format(self.prefix, self.name)
        return self.name


def is_namespace_declaration(prefix: str, uri: str) -> bool:
    """
    Guess if a pair of strings is a namespace declaration.

    The file format gives no hint, so this looks at the strings only:
    the prefix must be a single alphabetic token and the URI must be
    a http URL.
    """
    return bool(_prefix_pattern.fullmatch(prefix)) and uri.startswith("http://")


class NamespaceResolver:
    """
    Mapping of namespace URIs to namespace prefixes, both as string indices.

    Declarations are found while reading the tags and stay valid for the
    rest of the document.
    """

    def __init__(self, sb: StringBlock) -> None:
        self.sb = sb
        self.nsmap: Dict[int, int] = {}

    def try_register(self, name_index: int, flags_index: int) -> bool:
        """
        Check if the (name, flags) words of a tag header are a namespace
        declaration instead, and register it if so.

        :param name_index: would be the name of a tag, or the prefix
        :param flags_index: would be the flags of a tag, or the URI
        :returns: True if the pair was registered as a declaration
        """
        if not (self.sb.is_valid_index(name_index) and self.sb.is_valid_index(flags_index)):
            return False

        prefix = self.sb[name_index]
        uri = self.sb[flags_index]
        if not is_namespace_declaration(prefix, uri):
            return False

        if flags_index in self.nsmap and self.nsmap[flags_index] != name_index:
            logger.debug(
                "Namespace '{}' redeclared with prefix '{}'".format(uri, prefix)
            )
        logger.debug(
            "Namespace mapping: prefix {}: '{}' --> uri {}: '{}'".format(
                name_index, prefix, flags_index, uri
            )
        )
        self.nsmap[flags_index] = name_index
        return True

    def xmlns_attribute(self, uri_index: int) -> Attribute:
        """
        The `xmlns:<prefix>` attribute for a registered namespace
        """
        return Attribute("xmlns", self.sb[self.nsmap[uri_index]], self.sb[uri_index])

    def resolve_prefix(self, uri_index: int) -> Optional[int]:
        return self.nsmap.get(uri_index)

    def get_nsmap(self) -> Dict[str, str]:
        """
        Returns the namespace mapping as a dictionary of prefix to URI strings
        """
        return {self.sb[p]: self.sb[u] for u, p in self.nsmap.items()}
