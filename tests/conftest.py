"""Pytest configuration and fixtures."""

import shutil
from collections.abc import AsyncGenerator, Callable
from pathlib import Path

import pytest
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from libris.core.importer.service import BookImportService
from libris.db.session import build_session_factory, init_db

FIXTURES_DIR = Path(__file__).parent / "fixtures" / "onix"


@pytest.fixture
def fixtures_dir() -> Path:
    """Directory holding sample ONIX files."""
    return FIXTURES_DIR


@pytest.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """
    Provide an in-memory SQLite engine with all tables created.

    Yields:
        AsyncEngine shared by every session in the test
    """
    test_engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    await init_db(test_engine)
    yield test_engine
    await test_engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory bound to the test engine."""
    return build_session_factory(engine)


@pytest.fixture
async def session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """Provide an async session against the test database."""
    async with session_factory() as db_session:
        yield db_session


@pytest.fixture
def import_dirs(tmp_path: Path) -> dict[str, Path]:
    """Create incoming/processed/failed directories under a temp root."""
    dirs = {name: tmp_path / "imports" / name for name in ("incoming", "processed", "failed")}
    for directory in dirs.values():
        directory.mkdir(parents=True)
    return dirs


@pytest.fixture
def import_service(session: AsyncSession, import_dirs: dict[str, Path]) -> BookImportService:
    """BookImportService writing to the temp import directories."""
    return BookImportService(
        session=session,
        incoming_dir=import_dirs["incoming"],
        processed_dir=import_dirs["processed"],
        failed_dir=import_dirs["failed"],
        existing_book_policy="update",
    )


@pytest.fixture
def place_file(import_dirs: dict[str, Path]) -> Callable[..., Path]:
    """
    Put an ONIX document into the incoming directory.

    Returns a callable taking a filename and either ``content`` (XML text) or
    ``fixture`` (name of a sample file to copy).
    """

    def _place(filename: str, content: str | None = None, fixture: str | None = None) -> Path:
        target = import_dirs["incoming"] / filename
        if fixture is not None:
            shutil.copy(FIXTURES_DIR / fixture, target)
        else:
            target.write_text(content or "", encoding="utf-8")
        return target

    return _place


def build_onix_message(*products: str, sender: str | None = None) -> str:
    """Build a minimal ONIX 3.0 message around product fragments."""
    header = (
        f"<Header><Sender><SenderName>{sender}</SenderName></Sender></Header>"
        if sender is not None
        else "<Header/>"
    )
    return (
        '<?xml version="1.0" encoding="UTF-8"?>'
        f'<ONIXMessage release="3.0">{header}{"".join(products)}</ONIXMessage>'
    )


def build_onix_product(
    isbn13: str | None = None,
    isbn10: str | None = None,
    record_reference: str | None = None,
    title: str | None = None,
    author: str | None = None,
) -> str:
    """Build a Product fragment with optional identity, title and author."""
    parts = []
    if record_reference is not None:
        parts.append(f"<RecordReference>{record_reference}</RecordReference>")
    if isbn13 is not None:
        parts.append(
            f"<ProductIdentifier><ProductIDType>15</ProductIDType>"
            f"<IDValue>{isbn13}</IDValue></ProductIdentifier>"
        )
    if isbn10 is not None:
        parts.append(
            f"<ProductIdentifier><ProductIDType>02</ProductIDType>"
            f"<IDValue>{isbn10}</IDValue></ProductIdentifier>"
        )
    detail = []
    if title is not None:
        detail.append(
            f"<TitleDetail><TitleType>01</TitleType><TitleElement>"
            f"<TitleElementLevel>01</TitleElementLevel><TitleText>{title}</TitleText>"
            f"</TitleElement></TitleDetail>"
        )
    if author is not None:
        detail.append(
            f"<Contributor><ContributorRole>A01</ContributorRole>"
            f"<PersonName>{author}</PersonName></Contributor>"
        )
    if detail:
        parts.append(f"<DescriptiveDetail>{''.join(detail)}</DescriptiveDetail>")
    return f"<Product>{''.join(parts)}</Product>"


@pytest.fixture
def onix_message() -> Callable[..., str]:
    """Builder for ONIX message documents."""
    return build_onix_message


@pytest.fixture
def onix_product() -> Callable[..., str]:
    """Builder for ONIX Product fragments."""
    return build_onix_product
