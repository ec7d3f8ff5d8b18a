"""ONIX 3.0 short tag to reference tag normalization."""

from libris.core.onix.nodes import Node

# Element short tags (lowercase) mapped to reference tag names.
SHORT_TAG_MAP: dict[str, str] = {
    # Message and header
    "onixmessage": "ONIXMessage",
    "header": "Header",
    "sender": "Sender",
    "x298": "SenderName",
    "x299": "ContactName",
    "j272": "EmailAddress",
    "x307": "SentDateTime",
    "product": "Product",
    # Record and product identifiers
    "a001": "RecordReference",
    "a002": "NotificationType",
    "a197": "RecordSourceName",
    "productidentifier": "ProductIdentifier",
    "b221": "ProductIDType",
    "b233": "IDTypeName",
    "b244": "IDValue",
    # Descriptive detail
    "descriptivedetail": "DescriptiveDetail",
    "x314": "ProductComposition",
    "b012": "ProductForm",
    "b333": "ProductFormDetail",
    # Titles
    "titledetail": "TitleDetail",
    "titleelement": "TitleElement",
    "b202": "TitleType",
    "x409": "TitleElementLevel",
    "b203": "TitleText",
    "b030": "TitlePrefix",
    "b031": "TitleWithoutPrefix",
    "b029": "Subtitle",
    # Contributors
    "contributor": "Contributor",
    "b034": "SequenceNumber",
    "b035": "ContributorRole",
    "b036": "PersonName",
    "b037": "PersonNameInverted",
    "b039": "NamesBeforeKey",
    "b040": "KeyNames",
    "b047": "CorporateName",
    "b044": "BiographicalNote",
    # Language
    "language": "Language",
    "b253": "LanguageRole",
    "b252": "LanguageCode",
    # Extent
    "extent": "Extent",
    "b218": "ExtentType",
    "b219": "ExtentValue",
    "b220": "ExtentUnit",
    # Subjects
    "subject": "Subject",
    "x425": "MainSubject",
    "b067": "SubjectSchemeIdentifier",
    "b068": "SubjectSchemeVersion",
    "b069": "SubjectCode",
    "b070": "SubjectHeadingText",
    # Collateral detail
    "collateraldetail": "CollateralDetail",
    "textcontent": "TextContent",
    "x426": "TextType",
    "x427": "ContentAudience",
    "d104": "Text",
    "supportingresource": "SupportingResource",
    "x436": "ResourceContentType",
    "x437": "ResourceMode",
    "resourceversion": "ResourceVersion",
    "x441": "ResourceForm",
    "x435": "ResourceLink",
    # Publishing detail
    "publishingdetail": "PublishingDetail",
    "imprint": "Imprint",
    "b079": "ImprintName",
    "publisher": "Publisher",
    "b291": "PublishingRole",
    "b081": "PublisherName",
    "b083": "CountryOfPublication",
    "b394": "PublishingStatus",
    "publishingdate": "PublishingDate",
    "x448": "PublishingDateRole",
    "b306": "Date",
    # Product supply
    "productsupply": "ProductSupply",
    "supplydetail": "SupplyDetail",
    "price": "Price",
    "x462": "PriceType",
    "j151": "PriceAmount",
    "j152": "CurrencyCode",
}


def normalize_tags(node: Node) -> Node:
    """
    Rewrite short-tag keys to reference tags throughout a node tree.

    Keys are matched case-insensitively; keys without a mapping (including
    reference tags already in canonical form, ``@``-prefixed attributes and the
    text key) pass through unchanged.

    Args:
        node: Any node

    Returns:
        Structurally identical tree using reference tag names
    """
    if isinstance(node, list):
        return [normalize_tags(item) for item in node]
    if isinstance(node, dict):
        return {
            SHORT_TAG_MAP.get(key.lower(), key): normalize_tags(value)
            for key, value in node.items()
        }
    return node
