from typing import BinaryIO, Union

from loguru import logger
from lxml import etree

from .errors import ResParserError
from .parser import AXMLParser, Tag


def render(node: Tag, depth: int = 0) -> str:
    """
    Render a tag and its children as indented XML text.
    Attribute values are written as they are stored, without escaping.
    The tag at depth 0 always gets a closing tag, so a document ends with
    the closing tag of its root.

    :param node: the tag to render
    :param depth: indentation level, one tab each
    """
    parts = []
    # (tag, depth, write the closing tag)
    stack = [(node, depth, False)]
    while stack:
        node, depth, closing = stack.pop()
        indent = "\t" * depth
        if closing:
            parts.append("{}</{}>\n".format(indent, node.name))
            continue
        if node.is_text:
            parts.append("{}{}\n".format(indent, node.name))
            continue

        parts.extend([indent, "<", node.name])
        for attr in node.attributes:
            parts.append(' {}="{}"'.format(attr.qualified_name(), attr.value))

        if not node.children and depth > 0:
            parts.append(" />\n")
            continue

        parts.append(">\n")
        stack.append((node, depth, True))
        stack.extend((child, depth + 1, False) for child in reversed(node.children))
    return "".join(parts)


class AXMLPrinter:
    """
    Converter for AXML files into XML text or a lxml ElementTree.

    The whole file is decoded on creation, any
    [ResParserError][axml2xml.errors.ResParserError] is passed on to the
    caller.
    """

    def __init__(self, raw_buff: Union[bytes, BinaryIO]) -> None:
        logger.debug("AXMLPrinter")

        self.axml = AXMLParser(raw_buff)
        self.root = self.axml.read_document()
        self._xml = None

    def get_xml(self) -> str:
        """
        Get the XML as a string
        """
        if self._xml is None:
            self._xml = render(self.root)
        return self._xml

    def get_buff(self) -> bytes:
        """
        Returns the XML encoded as UTF-8
        """
        return self.get_xml().encode("utf-8")

    def get_xml_obj(self) -> etree.Element:
        """
        Get the XML as an ElementTree object.

        Namespace declarations become the nsmap of the element they were
        found on, prefixed attributes are qualified with their URI.
        Elements lxml does not accept, like an empty name, are skipped
        together with their children.

        :raises ResParserError: if the root element can not be created
        :returns: `lxml.etree.Element` object
        """
        prefixes = self.axml.namespaces.get_nsmap()
        try:
            root = etree.Element(self.root.name, nsmap=self._nsmap(self.root))
        except ValueError as e:
            raise ResParserError(
                "Can not create root element '{}': {}".format(self.root.name, e)
            )

        stack = [(self.root, root)]
        while stack:
            node, elem = stack.pop()
            self._set_attributes(node, elem, prefixes)
            for child in node.children:
                if child.is_text:
                    if len(elem):
                        elem[-1].tail = (elem[-1].tail or "") + child.name
                    else:
                        elem.text = (elem.text or "") + child.name
                    continue
                try:
                    sub = etree.SubElement(elem, child.name, nsmap=self._nsmap(child))
                except ValueError as e:
                    logger.error(
                        "Invalid tag name '{}', skipping element: {}".format(child.name, e)
                    )
                    continue
                stack.append((child, sub))
        return root

    @staticmethod
    def _nsmap(node: Tag):
        nsmap = {a.name: a.value for a in node.attributes if a.prefix == "xmlns"}
        return nsmap or None

    @staticmethod
    def _set_attributes(node: Tag, elem, prefixes) -> None:
        for attr in node.attributes:
            if attr.prefix == "xmlns":
                continue
            name = attr.name
            if attr.prefix:
                name = "{{{}}}{}".format(prefixes[attr.prefix], attr.name)
            if name in elem.attrib:
                logger.warning(
                    "Duplicate attribute '{}'! Will overwrite!".format(attr.qualified_name())
                )
            try:
                elem.set(name, attr.value)
            except ValueError as e:
                logger.error(
                    "Dropping attribute '{}' of '{}': {}".format(attr.qualified_name(), node.name, e)
                )


def decode(buff: BinaryIO) -> str:
    """
    Decode an AXML stream into XML text

    :param buff: binary stream positioned at the start of the AXML data
    :raises DecodeError: if the data can not be decoded
    """
    return AXMLPrinter(buff).get_xml()


def decode_bytes(raw_buff: bytes) -> str:
    return AXMLPrinter(raw_buff).get_xml()
