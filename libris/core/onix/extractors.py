"""Field extractors for normalized ONIX product sub-trees.

Each extractor is a pure function over a node (see ``libris.core.onix.nodes``)
using reference tag names. Missing structure yields ``None`` or empty lists.
"""

from typing import NamedTuple

from libris.core.onix.nodes import Node, as_list, child, child_text, first, text
from libris.core.onix.text_cleaner import clean_text

# ProductIDType codes
ISBN13_ID_TYPES = frozenset({"03", "15"})
ISBN10_ID_TYPE = "02"

# ContributorRole code for "By (author)"
AUTHOR_ROLE = "A01"

# TextType codes: 03 = description, 02 = short description/annotation
DESCRIPTION_TEXT_TYPES = frozenset({"03", "02"})

# ResourceContentType code for front cover
FRONT_COVER_CONTENT_TYPE = "01"

# PublishingDateRole code for publication date
PUBLICATION_DATE_ROLE = "01"

# SubjectSchemeIdentifier codes
KEYWORDS_SCHEME = "20"
GENRE_SCHEMES = frozenset({"10", "12"})  # BISAC, BIC

# ExtentType codes counted as page count (main content, content pages)
PAGE_COUNT_EXTENT_TYPES = frozenset({"00", "10"})

# LanguageRole code for language of text
TEXT_LANGUAGE_ROLE = "01"


class Identifiers(NamedTuple):
    isbn13: str | None = None
    isbn10: str | None = None


class Title(NamedTuple):
    title: str | None = None
    subtitle: str | None = None


class Contributors(NamedTuple):
    author: str | None = None
    names: list[str] = []


class PublishingInfo(NamedTuple):
    publisher: str | None = None
    imprint: str | None = None
    publication_date: str | None = None


class PriceInfo(NamedTuple):
    price: str | None = None
    currency: str | None = None


class Classification(NamedTuple):
    genre: str | None = None
    subjects: list[str] = []
    keywords: list[str] = []


def extract_identifiers(product_identifiers: Node) -> Identifiers:
    """
    Extract ISBN-13 and ISBN-10 from ProductIdentifier nodes.

    Types 03 (GTIN-13) and 15 (ISBN-13) set the ISBN-13, type 02 sets the
    ISBN-10. When a type repeats, the last value wins.
    """
    isbn13 = None
    isbn10 = None
    for identifier in as_list(product_identifiers):
        id_value = child_text(identifier, "IDValue")
        if id_value is None:
            continue
        id_type = child_text(identifier, "ProductIDType")
        if id_type in ISBN13_ID_TYPES:
            isbn13 = id_value
        elif id_type == ISBN10_ID_TYPE:
            isbn10 = id_value
    return Identifiers(isbn13=isbn13, isbn10=isbn10)


def extract_title(title_detail: Node) -> Title:
    """
    Build the display title from the first TitleElement of the first TitleDetail.

    The prefix ("The", "A", ...) is joined to the title without prefix by a
    single space. TitleText is used when no TitleWithoutPrefix is given.
    """
    element = child(title_detail, "TitleElement")
    element = first(element)
    if element is None:
        return Title()

    prefix = child_text(element, "TitlePrefix")
    body = child_text(element, "TitleWithoutPrefix")
    if body is None:
        body = child_text(element, "TitleText")

    if prefix is not None and body is not None:
        title = f"{prefix} {body}"
    elif body is not None:
        title = body
    else:
        title = prefix

    return Title(title=title, subtitle=child_text(element, "Subtitle"))


def _person_name(contributor: Node) -> str | None:
    name = child_text(contributor, "PersonName")
    if name is not None:
        return name
    before_key = child_text(contributor, "NamesBeforeKey")
    key_names = child_text(contributor, "KeyNames")
    if key_names is not None:
        return f"{before_key} {key_names}" if before_key is not None else key_names
    return child_text(contributor, "PersonNameInverted")


def extract_contributors(contributors: Node) -> Contributors:
    """
    Collect contributor names in document order.

    The first contributor with role A01 becomes the primary author. Without an
    A01 contributor the author stays None even if other names exist.
    """
    names: list[str] = []
    author = None
    for contributor in as_list(contributors):
        name = _person_name(contributor)
        if name is None:
            continue
        names.append(name)
        if author is None and child_text(contributor, "ContributorRole") == AUTHOR_ROLE:
            author = name
    return Contributors(author=author, names=names)


def extract_description(collateral_detail: Node) -> str | None:
    """Return the first description (TextType 03 or 02) as plain text."""
    for content in as_list(child(collateral_detail, "TextContent")):
        if child_text(content, "TextType") not in DESCRIPTION_TEXT_TYPES:
            continue
        description = clean_text(child_text(content, "Text"))
        if description is not None:
            return description
    return None


def extract_cover_image(collateral_detail: Node) -> str | None:
    """Return the first resource link of the first front cover resource."""
    for resource in as_list(child(collateral_detail, "SupportingResource")):
        if child_text(resource, "ResourceContentType") != FRONT_COVER_CONTENT_TYPE:
            continue
        for version in as_list(child(resource, "ResourceVersion")):
            link = child_text(version, "ResourceLink")
            if link is not None:
                return link
    return None


def extract_publishing_info(publishing_detail: Node) -> PublishingInfo:
    """
    Extract publisher, imprint and publication date.

    Only a PublishingDate with role 01 provides the publication date; embargo,
    announcement and other dates are ignored. The date string keeps its source
    format.
    """
    publication_date = None
    for publishing_date in as_list(child(publishing_detail, "PublishingDate")):
        if child_text(publishing_date, "PublishingDateRole") == PUBLICATION_DATE_ROLE:
            publication_date = child_text(publishing_date, "Date")
            break

    return PublishingInfo(
        publisher=child_text(publishing_detail, "Publisher", "PublisherName"),
        imprint=child_text(publishing_detail, "Imprint", "ImprintName"),
        publication_date=publication_date,
    )


def extract_price(product_supply: Node) -> PriceInfo:
    """
    Read the first price of the first supply detail.

    The price string combines amount and currency ("19.99 USD") when both are
    present, otherwise it is the amount alone.
    """
    price = child(product_supply, "SupplyDetail", "Price")
    amount = child_text(price, "PriceAmount")
    currency = child_text(price, "CurrencyCode")
    if amount is not None and currency is not None:
        return PriceInfo(price=f"{amount} {currency}", currency=currency)
    return PriceInfo(price=amount, currency=currency)


def extract_classification(descriptive_detail: Node) -> Classification:
    """
    Split Subject nodes into keywords, subjects and a single genre.

    Scheme 20 headings are keyword lists separated by ';'. Every other heading
    is a subject; the first BIC (12) or BISAC (10) heading becomes the genre.
    """
    genre = None
    subjects: list[str] = []
    keywords: list[str] = []
    for subject in as_list(child(descriptive_detail, "Subject")):
        heading = child_text(subject, "SubjectHeadingText")
        if heading is None:
            continue
        scheme = child_text(subject, "SubjectSchemeIdentifier")
        if scheme == KEYWORDS_SCHEME:
            keywords.extend(
                keyword.strip() for keyword in heading.split(";") if keyword.strip()
            )
            continue
        subjects.append(heading)
        if genre is None and scheme in GENRE_SCHEMES:
            genre = heading
    return Classification(genre=genre, subjects=subjects, keywords=keywords)


def extract_page_count(descriptive_detail: Node) -> int | None:
    """Return the main content page count (ExtentType 00 or 10) as an integer."""
    for extent in as_list(child(descriptive_detail, "Extent")):
        if child_text(extent, "ExtentType") not in PAGE_COUNT_EXTENT_TYPES:
            continue
        value = child_text(extent, "ExtentValue")
        if value is None:
            return None
        try:
            return int(value)
        except ValueError:
            return None
    return None


def extract_language(descriptive_detail: Node) -> str | None:
    """Return the language of the text, falling back to the first language code."""
    languages = as_list(child(descriptive_detail, "Language"))
    for language in languages:
        if child_text(language, "LanguageRole") == TEXT_LANGUAGE_ROLE:
            return child_text(language, "LanguageCode")
    if languages:
        return child_text(languages[0], "LanguageCode")
    return None


def extract_product_form(descriptive_detail: Node) -> str | None:
    """Return the ONIX product form code (e.g. BC for paperback)."""
    return text(child(descriptive_detail, "ProductForm"))
