from struct import pack

from axml2xml.cursor import ByteCursor
from axml2xml.stringblock import StringBlock

SENTINEL = 0xFFFFFFFF
ANDROID_NS = "http://schemas.android.com/apk/res/android"

RES_XML_START_NAMESPACE_TYPE = 0x00100100
RES_XML_END_NAMESPACE_TYPE = 0x00100101
RES_XML_START_ELEMENT_TYPE = 0x00100102
RES_XML_END_ELEMENT_TYPE = 0x00100103
RES_XML_CDATA_TYPE = 0x00100104
RES_XML_RESOURCE_MAP_TYPE = 0x00080180

TYPE_STRING = 0x03000008
TYPE_INT_DEC = 0x10000008


def words(*values):
    return pack('<{}L'.format(len(values)), *values)


def encode_string_data(strings, layout=None):
    '''Lay out the strings in the order given by `layout` (a list of pool
    indices) and return the offset table in pool order plus the data.'''
    if layout is None:
        layout = range(len(strings))
    offsets = [0] * len(strings)
    data = b''
    for i in layout:
        offsets[i] = len(data)
        encoded = strings[i].encode('utf-16-le')
        data += pack('<H', len(encoded) // 2) + encoded + b'\x00\x00'
    return offsets, data


def encode_pool(strings, layout=None, magic=0x00080003, file_size=0):
    '''Preamble, offset table and aligned string data.'''
    offsets, data = encode_string_data(strings, layout)
    data += b'\x00' * (-len(data) % 4)
    n = len(strings)
    strings_start = 28 + 4 * n
    preamble = words(magic, file_size, 0x001C0001, strings_start + len(data),
                     n, 0, 0, strings_start, 0)
    return preamble + words(*offsets) + data


class Element:
    def __init__(self, name, attributes=(), children=(), namespaces=()):
        # attributes are (namespace uri or None, name, string value or int),
        # namespaces are (prefix, uri) declared right before the element
        self.name = name
        self.attributes = list(attributes)
        self.children = list(children)
        self.namespaces = list(namespaces)


class Text:
    def __init__(self, text):
        self.text = text


class AXMLBuilder:
    '''Writes AXML the way aapt does: a string pool followed by a resource map
    and start namespace / element / CDATA / end chunks.'''

    def __init__(self, root, namespaces=(('android', ANDROID_NS),), layout='reversed'):
        self.root = root
        self.namespaces = list(namespaces)
        self.layout = layout
        self.strings = []
        self.line = 1

    def index(self, s):
        if s not in self.strings:
            self.strings.append(s)
        return self.strings.index(s)

    def _chunk_header(self, chunk_type, size):
        self.line += 1
        return words(chunk_type, size, self.line, SENTINEL)

    def _namespace(self, chunk_type, prefix, uri):
        return self._chunk_header(chunk_type, 0x18) + words(self.index(prefix), self.index(uri))

    def _element(self, elem):
        body = b''.join(self._namespace(RES_XML_START_NAMESPACE_TYPE, p, u) for p, u in elem.namespaces)
        body += self._chunk_header(RES_XML_START_ELEMENT_TYPE, 0x24 + 20 * len(elem.attributes))
        body += words(SENTINEL, self.index(elem.name), 0x00140014, len(elem.attributes), 0)
        for uri, name, value in elem.attributes:
            ns = SENTINEL if uri is None else self.index(uri)
            if isinstance(value, int):
                body += words(ns, self.index(name), SENTINEL, TYPE_INT_DEC, value)
            else:
                raw = self.index(value)
                body += words(ns, self.index(name), raw, TYPE_STRING, raw)
        for child in elem.children:
            if isinstance(child, Text):
                body += self._chunk_header(RES_XML_CDATA_TYPE, 0x1c)
                body += words(self.index(child.text), TYPE_STRING, 0)
            else:
                body += self._element(child)
        body += self._chunk_header(RES_XML_END_ELEMENT_TYPE, 0x18)
        body += words(SENTINEL, self.index(elem.name))
        for p, u in reversed(elem.namespaces):
            body += self._namespace(RES_XML_END_NAMESPACE_TYPE, p, u)
        return body

    def body(self):
        ns_indices = [(self.index(p), self.index(u)) for p, u in self.namespaces]
        body = words(RES_XML_RESOURCE_MAP_TYPE, 16, 0x0101021b, 0x0101021c)
        for prefix, uri in ns_indices:
            body += self._chunk_header(RES_XML_START_NAMESPACE_TYPE, 0x18)
            body += words(prefix, uri)
        body += self._element(self.root)
        for prefix, uri in reversed(ns_indices):
            body += self._chunk_header(RES_XML_END_NAMESPACE_TYPE, 0x18)
            body += words(prefix, uri)
        return body

    def to_bytes(self):
        body = self.body()
        layout = None
        if self.layout == 'reversed':
            layout = list(reversed(range(len(self.strings))))
        pool = encode_pool(self.strings, layout)
        return pool[:4] + words(len(pool) + len(body)) + pool[8:] + body


def manifest(children=(), package='com.example.app'):
    return Element('manifest', [
        (ANDROID_NS, 'versionCode', 1),
        (None, 'package', package),
    ], children)


def check_balanced(xml):
    '''Re-parse rendered XML with a stack, return the number of elements.'''
    stack = []
    count = 0
    for line in xml.splitlines():
        line = line.strip()
        if not line.startswith('<'):
            continue
        name = line.strip('</>').split()[0]
        if line.startswith('</'):
            assert stack and stack.pop() == name
        elif line.endswith('/>'):
            count += 1
        else:
            stack.append(name)
            count += 1
    assert stack == []
    return count


def string_block(strings, layout=None):
    offsets, data = encode_string_data(strings, layout)
    data += b'\x00' * (-len(data) % 4)
    return StringBlock(ByteCursor(words(*offsets) + data), len(strings))


def records(strings, *body):
    '''A pool followed by hand written tag records.'''
    return encode_pool(strings) + words(RES_XML_RESOURCE_MAP_TYPE, SENTINEL) + b''.join(body)
