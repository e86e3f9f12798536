from typing import BinaryIO, List, Optional, Union

from loguru import logger

from .cursor import SENTINEL, ByteCursor, skip_past_sentinel
from .errors import InvalidStringIndex
from .header import AXMLHeader
from .namespaces import Attribute, NamespaceResolver
from .stringblock import StringBlock

# Bits of the flags word of a tag record
TAG_TEXT = 0x08
TAG_OPEN = 0x10
TAG_SUPPORTS_CHILDREN = 0x100000

# OPEN TAG (normal, child, 3 attributes):
# V=tagS 0x1400 1400 V=3 V=0 V=ns V=attrS V=valS 0x0800 0010 V=~0 ... 0x0301 1000 V=0x18 V=0x0b V=~0 V=~0
#
# OPEN TAG (normal, child, no attributes):
# V=tagS 0x1400 1400 V=0 V=0 0x0301 1000 V=0x18 V=0x0b V=~0 V=~0
#
# CLOSE TAG (normal, child):
# V=tagS 0x0401 1000 V=0x1c V=0 V=~0
#
# TEXT:
# V=1 0x0800 0000 V=0x19 0x0201 1000 V=0x38 V=7 V=~0 V=~0


class Tag:
    """
    One element or text node of the decoded document
    """

    def __init__(self, name: str, flags: int, attributes: Optional[List[Attribute]] = None) -> None:
        self.name = name
        self.flags = flags
        self.attributes = attributes if attributes is not None else []
        self.children: List["Tag"] = []

    @property
    def is_open(self) -> bool:
        return self.flags & TAG_OPEN != 0

    @property
    def supports_children(self) -> bool:
        return self.flags & TAG_SUPPORTS_CHILDREN != 0

    @property
    def is_text(self) -> bool:
        return self.flags & TAG_TEXT != 0

    def __repr__(self):
        return "<Tag name='{}' flags='0x{:08x}' attributes='{}' children='{}'>".format(
            self.name, self.flags, len(self.attributes), len(self.children)
        )


class AXMLParser:
    """
    `AXMLParser` reads the preamble and the string pool on creation,
    then [read_document][axml2xml.parser.AXMLParser.read_document] builds
    the tree of tags from the rest of the stream.

    Every tag record starts with a name index and a flags word and ends at a
    run of sentinels. Namespace declarations look like a tag record whose
    name and flags are string indices of a prefix and a URI.
    """

    def __init__(self, buff: Union[BinaryIO, bytes]) -> None:
        logger.debug("AXMLParser")
        self.buff = buff if isinstance(buff, ByteCursor) else ByteCursor(buff)

        self.header = AXMLHeader(self.buff)
        logger.debug("HEADER {}".format(self.header))

        self.sb = StringBlock(self.buff, self.header.get_string_count())
        logger.debug("STRING_POOL {}".format(self.sb))

        self.namespaces = NamespaceResolver(self.sb)

        # Resource map and the start of the first chunk, not parsed
        skip_past_sentinel(self.buff)

    def read_document(self) -> Tag:
        """
        Read the root tag and everything inside of it

        :raises TruncatedStream: if the stream ends before the root is closed
        """
        root = self.read_tag()
        root.children = self.read_children(root.name)
        return root

    def read_children(self, stop_name: str) -> List[Tag]:
        """
        Read tags until the closing tag called `stop_name`.
        The closing tag itself is not part of the result.

        Open tags are kept on an explicit stack, each closed by the next
        closing tag with the same name, so nesting depth is only limited
        by memory.
        """
        top = Tag(stop_name, TAG_OPEN | TAG_SUPPORTS_CHILDREN)
        stack = [top]
        while stack:
            tag = self.read_tag()
            if tag.supports_children:
                if tag.is_open:
                    stack[-1].children.append(tag)
                    stack.append(tag)
                    continue
                if tag.name == stack[-1].name:
                    stack.pop()
                    continue
            stack[-1].children.append(tag)
        return top.children

    def read_tag(self) -> Tag:
        """
        Read one tag record, including the namespace declarations in front
        of it.

        :raises InvalidStringIndex: if an index points outside of the pool
        :raises TruncatedStream: if the stream ends inside the record
        """
        attributes = []
        while True:
            name = self.buff.read_u32()
            flags = self.buff.read_u32()
            if not self.namespaces.try_register(name, flags):
                break
            attributes.append(self.namespaces.xmlns_attribute(flags))
            skip_past_sentinel(self.buff)

        logger.debug(f"tag name: {name}, flags: 0x{flags:08x}")

        if flags & TAG_SUPPORTS_CHILDREN and flags & TAG_OPEN:
            attribute_count = self.buff.read_u32()
            # unknown, usually 0
            self.buff.read_u32()
            logger.debug(f"attribute_count: {attribute_count}")

            for _ in range(attribute_count):
                attributes.append(self._read_attribute())
        else:
            # two unknown words
            self.buff.skip(8)

        skip_past_sentinel(self.buff)

        tag = Tag(self.sb[name], flags, attributes)
        logger.debug("TAG {}".format(tag))
        return tag

    def _read_attribute(self) -> Attribute:
        ns = self.buff.read_u32()
        name = self.buff.read_u32()
        value = self.buff.read_u32()
        attr_flags = self.buff.read_u32()
        # padding
        self.buff.read_u32()
        logger.debug(
            f"attribute ns: 0x{ns:08x}, name: {name}, value: 0x{value:08x}, flags: 0x{attr_flags:08x}"
        )

        # -1, last index of the string pool
        if value == SENTINEL:
            value = len(self.sb) - 1

        prefix = None
        if ns != SENTINEL:
            if not self.sb.is_valid_index(ns):
                raise InvalidStringIndex(ns, len(self.sb))
            prefix_index = self.namespaces.resolve_prefix(ns)
            if prefix_index is None:
                logger.warning(
                    "Attribute '{}' uses an undeclared namespace: {}. Dropping the prefix.".format(
                        self.sb[name], ns
                    )
                )
            else:
                prefix = self.sb[prefix_index]

        attr = Attribute(prefix, self.sb[name], self.sb[value])
        logger.debug("found an attribute: {}='{}'".format(attr.qualified_name(), attr.value))
        return attr
