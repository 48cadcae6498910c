"""
Shared pytest fixtures - every test gets its own SQLite database file under tmp_path
"""

import pytest

import catalog
from database_models import create_database, get_session_factory


@pytest.fixture
def engine(tmp_path):
    engine = create_database(tmp_path / 'library_test.db')
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return get_session_factory(engine)


@pytest.fixture
def session(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def book_id(session):
    """a book with two copies on the shelf"""
    return catalog.add_book(
        session,
        'The Pragmatic Programmer',
        '978-0201616224',
        author='Andrew Hunt',
        publisher='Addison-Wesley',
        publication_year=1999,
        genre='Programming',
        quantity=2,
    )


@pytest.fixture
def single_copy_book_id(session):
    return catalog.add_book(
        session,
        'Dune',
        '978-0441013593',
        author='Frank Herbert',
        publisher='Ace',
        publication_year=1965,
        genre='Science Fiction',
        quantity=1,
    )


@pytest.fixture
def member_id(session):
    return catalog.add_member(session, 'Alice Kim', '010-1234-5678', 'Seoul', today='2024-12-01')


@pytest.fixture
def other_member_id(session):
    return catalog.add_member(session, 'Bob Lee', '010-8765-4321', 'Busan', today='2024-12-01')
