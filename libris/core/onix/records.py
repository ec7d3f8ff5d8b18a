"""Record types produced by the ONIX parser."""

from dataclasses import dataclass, field


@dataclass
class ParsedBook:
    """Flat, best-effort view of one ONIX product.

    Every field is optional. List fields are empty rather than None when the
    product carries no values.
    """

    record_reference: str | None = None
    isbn13: str | None = None
    isbn10: str | None = None
    title: str | None = None
    subtitle: str | None = None
    author: str | None = None
    contributors: list[str] = field(default_factory=list)
    description: str | None = None
    publisher: str | None = None
    imprint: str | None = None
    publication_date: str | None = None
    price: str | None = None
    currency: str | None = None
    genre: str | None = None
    subjects: list[str] = field(default_factory=list)
    keywords: list[str] = field(default_factory=list)
    language: str | None = None
    page_count: int | None = None
    product_form: str | None = None
    cover_image_url: str | None = None

    @property
    def identifier(self) -> str | None:
        """Best available identity: ISBN-13, then ISBN-10, then record reference."""
        for value in (self.isbn13, self.isbn10, self.record_reference):
            if value is not None:
                return value
        return None


@dataclass
class OnixParseResult:
    """Outcome of parsing one ONIX file.

    ``error`` is set for file-level failures (malformed XML, missing root or
    product list); ``books`` is empty in that case.
    """

    books: list[ParsedBook] = field(default_factory=list)
    source: str | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None
