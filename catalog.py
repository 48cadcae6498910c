"""
Library System Catalog
Book and member records plus the accessors the circulation engine uses to read availability and record penalties

Write operations commit their own transaction. The accessors (book_available, set_book_available,
member_overdue_snapshot, apply_suspension) never commit - they run inside the caller's transaction.
"""

import logging

from sqlalchemy import select, update, delete, func, or_

import date_utils
from database_models import Book, Member, Loan, transaction
from errors import NotFound, BookUnavailable

logger = logging.getLogger(__name__)


# accessors used by the circulation engine

def book_available(session, book_id):
    available = session.execute(
        select(Book.available).where(Book.book_id == book_id)
    ).scalar_one_or_none()
    if available is None:
        raise NotFound('Book', book_id)
    return available


def set_book_available(session, book_id, delta):
    """adds delta to the available count of a book

    a negative delta only applies while the count stays at or above zero, so two callers racing for
    the last copy cannot both take it
    """
    stmt = update(Book).where(Book.book_id == book_id)
    if delta < 0:
        stmt = stmt.where(Book.available + delta >= 0)
    stmt = stmt.values(available=Book.available + delta).execution_options(synchronize_session=False)

    result = session.execute(stmt)
    if result.rowcount == 0:
        # tell a missing book apart from one with no copies left
        book_available(session, book_id)
        raise BookUnavailable(book_id)


def member_overdue_snapshot(session, member_id, today=None):
    """overdue days for a member as the database computes them from open loans"""
    _require_member(session, member_id)
    today_str = date_utils.format_date(today if today is not None else date_utils.today())

    overdue = session.execute(
        select(func.max(func.julianday(today_str) - func.julianday(Loan.due_date)))
        .where(Loan.member_id == member_id, Loan.is_returned.is_(False))
    ).scalar()

    if overdue is None or overdue <= 0:
        return 0
    return int(overdue)


def apply_suspension(session, member_id, days):
    result = session.execute(
        update(Member)
        .where(Member.member_id == member_id)
        .values(penalty_days=days)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        raise NotFound('Member', member_id)
    logger.info(f"Recorded suspension of {days} days for member {member_id}")


# books

def add_book(session, title, isbn, author='', publisher='', publication_year=None, genre='', quantity=1):
    if not title or not isbn:
        raise ValueError("Title and ISBN are required")
    if quantity < 0:
        raise ValueError("Quantity cannot be negative")

    book = Book(
        title=title,
        author=author or '',
        publisher=publisher or '',
        publication_year=publication_year,
        isbn=isbn,
        genre=genre or '',
        quantity=quantity,
        available=quantity,
    )
    with transaction(session, f"adding book '{title}'"):
        session.add(book)
        session.flush()

    logger.info(f"Book added successfully (ID: {book.book_id}, ISBN: {isbn})")
    return book.book_id


def get_book(session, book_id):
    book = session.get(Book, book_id, populate_existing=True)
    if book is None:
        raise NotFound('Book', book_id)
    return book


def list_books(session):
    return session.execute(select(Book).order_by(Book.book_id)).scalars().all()


def search_books(session, keyword):
    """matches the keyword against title, author and ISBN"""
    pattern = f"%{keyword}%"
    stmt = (
        select(Book)
        .where(or_(Book.title.like(pattern), Book.author.like(pattern), Book.isbn.like(pattern)))
        .order_by(Book.book_id)
    )
    return session.execute(stmt).scalars().all()


def search_books_by_genre(session, genre):
    stmt = select(Book).where(Book.genre.like(f"%{genre}%")).order_by(Book.book_id)
    return session.execute(stmt).scalars().all()


def search_books_by_author(session, author):
    stmt = select(Book).where(Book.author.like(f"%{author}%")).order_by(Book.book_id)
    return session.execute(stmt).scalars().all()


def update_book(session, book_id, title=None, author=None, publisher=None, publication_year=None, genre=None):
    values = {}
    if title is not None:
        values['title'] = title
    if author is not None:
        values['author'] = author
    if publisher is not None:
        values['publisher'] = publisher
    if publication_year is not None and publication_year > 0:
        values['publication_year'] = publication_year
    if genre is not None:
        values['genre'] = genre

    if not values:
        raise ValueError("No fields to update")

    with transaction(session, f"updating book {book_id}"):
        result = session.execute(
            update(Book).where(Book.book_id == book_id).values(**values)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            raise NotFound('Book', book_id)

    logger.info(f"Book {book_id} updated: {', '.join(sorted(values))}")
    return get_book(session, book_id)


def delete_book(session, book_id):
    # loans keep a foreign key to the book, so a book with loan history cannot be deleted
    with transaction(session, f"deleting book {book_id}"):
        result = session.execute(delete(Book).where(Book.book_id == book_id))
        if result.rowcount == 0:
            raise NotFound('Book', book_id)
    logger.info(f"Book {book_id} deleted")


# members

def add_member(session, name, phone='', address='', today=None):
    if not name:
        raise ValueError("Member name is required")

    member = Member(
        name=name,
        phone=phone or '',
        address=address or '',
        registration_date=date_utils.as_date(today) if today is not None else date_utils.today(),
        penalty_days=0,
    )
    with transaction(session, f"adding member '{name}'"):
        session.add(member)
        session.flush()

    logger.info(f"Member added successfully (ID: {member.member_id})")
    return member.member_id


def get_member(session, member_id):
    member = session.get(Member, member_id, populate_existing=True)
    if member is None:
        raise NotFound('Member', member_id)
    return member


def list_members(session):
    return session.execute(select(Member).order_by(Member.member_id)).scalars().all()


def search_members_by_name(session, name):
    stmt = select(Member).where(Member.name.like(f"%{name}%")).order_by(Member.member_id)
    return session.execute(stmt).scalars().all()


def update_member(session, member_id, name=None, phone=None, address=None):
    values = {}
    if name:
        values['name'] = name
    if phone is not None:
        values['phone'] = phone
    if address is not None:
        values['address'] = address

    if not values:
        raise ValueError("No fields to update")

    with transaction(session, f"updating member {member_id}"):
        result = session.execute(
            update(Member).where(Member.member_id == member_id).values(**values)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            raise NotFound('Member', member_id)

    logger.info(f"Member {member_id} updated: {', '.join(sorted(values))}")
    return get_member(session, member_id)


def delete_member(session, member_id):
    with transaction(session, f"deleting member {member_id}"):
        result = session.execute(delete(Member).where(Member.member_id == member_id))
        if result.rowcount == 0:
            raise NotFound('Member', member_id)
    logger.info(f"Member {member_id} deleted")


def get_member_count(session):
    return session.execute(select(func.count(Member.member_id))).scalar_one()


def _require_member(session, member_id):
    found = session.execute(
        select(Member.member_id).where(Member.member_id == member_id)
    ).scalar_one_or_none()
    if found is None:
        raise NotFound('Member', member_id)
