"""ONIX 3.0 file and product parsing.

Accepts both reference tags (``RecordReference``) and short tags (``a001``),
including files that mix the two.
"""

import xml.etree.ElementTree as ET
from pathlib import Path

import structlog

from libris.core.onix.extractors import (
    extract_classification,
    extract_contributors,
    extract_cover_image,
    extract_description,
    extract_identifiers,
    extract_language,
    extract_page_count,
    extract_price,
    extract_product_form,
    extract_publishing_info,
    extract_title,
)
from libris.core.onix.nodes import (
    Node,
    as_list,
    child,
    child_text,
    element_to_node,
    get_ignore_case,
    local_name,
)
from libris.core.onix.records import OnixParseResult, ParsedBook
from libris.core.onix.tags import normalize_tags
from libris.utils.exceptions import OnixParseError

logger = structlog.get_logger(__name__)

ROOT_NOT_FOUND = "Invalid ONIX format: root element not found"
NO_PRODUCTS_FOUND = "No products found in ONIX file"

# Filename tokens identifying known publisher feeds, checked in order.
KNOWN_SOURCES: tuple[tuple[str, str], ...] = (
    ("aponix", "APONIX"),
    ("penguin", "Penguin Random House"),
)
UNKNOWN_SOURCE = "Unknown"


def parse_product(product: Node) -> ParsedBook:
    """
    Parse one Product node into a ParsedBook.

    Nothing is required: a product without identifiers or title is still
    returned for the importer to handle.

    Args:
        product: Raw product node (short or reference tags)

    Returns:
        ParsedBook with every field the product provides
    """
    normalized = normalize_tags(product)
    descriptive = child(normalized, "DescriptiveDetail")
    collateral = child(normalized, "CollateralDetail")

    identifiers = extract_identifiers(child(normalized, "ProductIdentifier"))
    title = extract_title(child(descriptive, "TitleDetail"))
    contributors = extract_contributors(child(descriptive, "Contributor"))
    publishing = extract_publishing_info(child(normalized, "PublishingDetail"))
    price = extract_price(child(normalized, "ProductSupply"))
    classification = extract_classification(descriptive)

    return ParsedBook(
        record_reference=child_text(normalized, "RecordReference"),
        isbn13=identifiers.isbn13,
        isbn10=identifiers.isbn10,
        title=title.title,
        subtitle=title.subtitle,
        author=contributors.author,
        contributors=list(contributors.names),
        description=extract_description(collateral),
        publisher=publishing.publisher,
        imprint=publishing.imprint,
        publication_date=publishing.publication_date,
        price=price.price,
        currency=price.currency,
        genre=classification.genre,
        subjects=list(classification.subjects),
        keywords=list(classification.keywords),
        language=extract_language(descriptive),
        page_count=extract_page_count(descriptive),
        product_form=extract_product_form(descriptive),
        cover_image_url=extract_cover_image(collateral),
    )


def parse_onix_document(content: str | bytes) -> tuple[list[ParsedBook], str | None]:
    """
    Parse an ONIX XML document.

    Raw bytes are decoded by the XML parser itself, honouring a byte order
    mark or the encoding named in the XML declaration (UTF-8 when absent).

    Args:
        content: Full XML document as text or raw bytes

    Returns:
        Tuple of (parsed books, sender name from the header)

    Raises:
        OnixParseError: If the XML is malformed or lacks the message root or
            products. ``source`` is attached to the error when known.
    """
    try:
        element = ET.fromstring(content)
    except ET.ParseError as e:
        raise OnixParseError(f"Invalid XML: {e}") from e

    document = {local_name(element.tag): element_to_node(element)}
    root = get_ignore_case(document, "ONIXMessage")
    if root is None:
        raise OnixParseError(ROOT_NOT_FOUND)

    root = normalize_tags(root)
    source = child_text(root, "Header", "Sender", "SenderName")

    products = as_list(child(root, "Product"))
    if not products:
        raise OnixParseError(NO_PRODUCTS_FOUND, source=source)

    return [parse_product(product) for product in products], source


def parse_onix_file(filepath: Path) -> OnixParseResult:
    """
    Read and parse an ONIX file.

    File-level problems (malformed XML, missing root, no products) are
    reported through ``OnixParseResult.error`` rather than raised. Errors
    reading the file itself propagate.

    Args:
        filepath: Path to the XML file

    Returns:
        OnixParseResult with parsed books and detected source
    """
    content = filepath.read_bytes()

    try:
        books, source = parse_onix_document(content)
    except OnixParseError as e:
        logger.warning("onix_parse_failed", filepath=str(filepath), error=str(e))
        return OnixParseResult(error=str(e), source=e.source)

    logger.debug(
        "onix_file_parsed",
        filepath=str(filepath),
        book_count=len(books),
        source=source,
    )
    return OnixParseResult(books=books, source=source)


def detect_onix_source(filename: str) -> str:
    """
    Detect the publisher feed from a filename.

    Args:
        filename: Name of the ONIX file

    Returns:
        Feed name, or "Unknown" when no known token matches
    """
    lowered = filename.lower()
    for token, source in KNOWN_SOURCES:
        if token in lowered:
            return source
    return UNKNOWN_SOURCE
