"""
KML markup serializer.

Renders a GeoDocument into UTF-8 KML bytes. The element order is fixed:

    kml
      Document
        name
        Style (shared mode only)
        Folder
          name
          Placemark*
            name
            description
            Style | styleUrl (styled modes only)
            Point
              coordinates

Pretty and compact output differ only in inter-element whitespace; text
content is never touched by indentation.
"""

import math
import re
from decimal import Decimal
from typing import List, NamedTuple, Optional, Sequence, Tuple
from xml.sax.saxutils import escape

from skykml.errors import SerializationError
from skykml.kml.document import GeoDocument, Placemark, Point, Style

KML_NAMESPACE = 'http://www.opengis.net/kml/2.2'
XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>'
INDENT = '  '

# Characters XML 1.0 cannot carry, even escaped
_INVALID_XML_CHARS = re.compile('[\x00-\x08\x0b\x0c\x0e-\x1f\ud800-\udfff\ufffe\uffff]')

_ENTITIES = {'"': '&quot;', "'": '&apos;', '\r': '&#13;'}


class Element(NamedTuple):
    tag: str
    text: Optional[str] = None
    children: Sequence['Element'] = ()
    attrs: Tuple[Tuple[str, str], ...] = ()


def escape_text(value: str) -> str:
    """
    Escape the five reserved markup characters and drop XML-illegal ones.

    Carriage returns become character references; a raw one would be
    normalized to a newline by any parser.
    """
    return escape(_INVALID_XML_CHARS.sub('', value), _ENTITIES)


def format_coordinate(value) -> str:
    """
    Plain decimal text for a coordinate component.

    Integral values lose their '.0' and nothing is written in exponent form.
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise SerializationError(f'coordinate component is not a number: {value!r}')
    if isinstance(value, int):
        return str(value)
    if not math.isfinite(value):
        raise SerializationError(f'coordinate component is not finite: {value!r}')
    if value.is_integer() and abs(value) < 1e15:
        return str(int(value))
    text = repr(value)
    if 'e' in text or 'E' in text:
        text = format(Decimal(text), 'f')
    return text


def format_coordinates(point: Point) -> str:
    return ','.join(
        format_coordinate(v) for v in (point.longitude, point.latitude, point.altitude)
    )


def _style_element(style: Style) -> Element:
    icon = style.icon
    icon_children = []
    if icon.heading is not None:
        icon_children.append(Element('heading', str(icon.heading)))
    icon_children.append(Element('scale', icon.scale))
    icon_children.append(Element('Icon', children=[Element('href', icon.href)]))

    attrs = (('id', style.id),) if style.id else ()
    return Element('Style', children=[Element('IconStyle', children=icon_children)], attrs=attrs)


def _placemark_element(placemark: Placemark, index: int) -> Element:
    if not isinstance(placemark, Placemark):
        raise SerializationError(f'placemark {index} is not a Placemark')
    if placemark.point is None:
        raise SerializationError(f'placemark {index} has no point')
    if not isinstance(placemark.name, str) or not isinstance(placemark.description, str):
        raise SerializationError(f'placemark {index} has non-text name or description')
    if placemark.style is not None and placemark.style_url is not None:
        raise SerializationError(f'placemark {index} has both an inline style and a styleUrl')

    children = [
        Element('name', placemark.name),
        Element('description', placemark.description),
    ]
    if placemark.style is not None:
        children.append(_style_element(placemark.style))
    elif placemark.style_url is not None:
        children.append(Element('styleUrl', placemark.style_url))
    children.append(
        Element('Point', children=[Element('coordinates', format_coordinates(placemark.point))])
    )
    return Element('Placemark', children=children)


def to_element(doc: GeoDocument) -> Element:
    """Build the element tree for a document. Raises SerializationError."""
    document_children = [Element('name', doc.title)]
    if doc.shared_style is not None:
        if not doc.shared_style.id:
            raise SerializationError('shared style has no id')
        document_children.append(_style_element(doc.shared_style))

    folder_children = [Element('name', doc.folder_title)]
    folder_children.extend(
        _placemark_element(placemark, i) for i, placemark in enumerate(doc.placemarks)
    )
    document_children.append(Element('Folder', children=folder_children))

    return Element(
        'kml',
        children=[Element('Document', children=document_children)],
        attrs=(('xmlns', KML_NAMESPACE),),
    )


def _render(element: Element, depth: int, pretty: bool, out: List[str]) -> None:
    indent = INDENT * depth if pretty else ''
    newline = '\n' if pretty else ''
    attrs = ''.join(f' {name}="{escape_text(value)}"' for name, value in element.attrs)

    if element.children:
        out.append(f'{indent}<{element.tag}{attrs}>{newline}')
        for child in element.children:
            _render(child, depth + 1, pretty, out)
        out.append(f'{indent}</{element.tag}>{newline}')
    else:
        text = escape_text(element.text or '')
        out.append(f'{indent}<{element.tag}{attrs}>{text}</{element.tag}>{newline}')


def serialize(doc: GeoDocument, pretty: bool = True) -> bytes:
    """
    Render a GeoDocument as a complete KML byte string.

    Raises:
        SerializationError if the document breaks a structural invariant.
    """
    out = [XML_DECLARATION, '\n']
    _render(to_element(doc), 0, pretty, out)
    return ''.join(out).encode('utf-8')
