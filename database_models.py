import logging
from contextlib import contextmanager

from sqlalchemy import (
    create_engine, event, Column, Integer, String, Date, Boolean, ForeignKey, CheckConstraint, Index
)
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import declarative_base, sessionmaker, relationship

from errors import StorageFailure

logger = logging.getLogger(__name__)

Base = declarative_base()

DEFAULT_DB_PATH = 'library_circulation.db'


class Book(Base):
    """book table - one row per title, quantity copies of which available are on the shelf"""
    __tablename__ = 'Books'
    __table_args__ = (
        CheckConstraint('available >= 0 AND available <= quantity', name='ck_books_available'),
        Index('idx_books_title', 'title'),
        Index('idx_books_author', 'author'),
    )

    book_id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(100), nullable=False)
    author = Column(String(50), default='')
    publisher = Column(String(50), default='')
    publication_year = Column(Integer)
    isbn = Column(String(20), nullable=False, unique=True)
    genre = Column(String(30), default='')
    quantity = Column(Integer, nullable=False, default=1)
    available = Column(Integer, nullable=False, default=1)

    loans = relationship('Loan', back_populates='book')

    def __repr__(self):
        return f"<Book(id={self.book_id}, title='{self.title}', available={self.available}/{self.quantity})>"


class Member(Base):
    """member table - stores library member information and the last suspension applied"""
    __tablename__ = 'Members'
    __table_args__ = (
        Index('idx_members_name', 'name'),
    )

    member_id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(50), nullable=False)
    phone = Column(String(20), default='')
    address = Column(String(100), default='')
    registration_date = Column(Date, nullable=False)
    penalty_days = Column(Integer, nullable=False, default=0)

    loans = relationship('Loan', back_populates='member')

    def __repr__(self):
        return f"<Member(id={self.member_id}, name='{self.name}')>"


class Loan(Base):
    """loan table - one row per checkout, only is_returned changes after insert"""
    __tablename__ = 'Loans'
    __table_args__ = (
        Index('idx_loans_book_id', 'book_id'),
        Index('idx_loans_member_id', 'member_id'),
        Index('idx_loans_is_returned', 'is_returned'),
    )

    loan_id = Column(Integer, primary_key=True, autoincrement=True)
    book_id = Column(Integer, ForeignKey('Books.book_id'), nullable=False)
    member_id = Column(Integer, ForeignKey('Members.member_id'), nullable=False)

    loan_date = Column(Date, nullable=False)
    due_date = Column(Date, nullable=False)
    is_returned = Column(Boolean, nullable=False, default=False)

    book = relationship('Book', back_populates='loans')
    member = relationship('Member', back_populates='loans')
    return_record = relationship('Return', back_populates='loan', uselist=False)

    def __repr__(self):
        return f"<Loan(id={self.loan_id}, book_id={self.book_id}, member_id={self.member_id}, returned={self.is_returned})>"


class Return(Base):
    """return table - written once when a loan is closed"""
    __tablename__ = 'Returns'
    __table_args__ = (
        CheckConstraint('overdue_days >= 0', name='ck_returns_overdue_days'),
    )

    return_id = Column(Integer, primary_key=True, autoincrement=True)
    loan_id = Column(Integer, ForeignKey('Loans.loan_id'), nullable=False, unique=True)
    return_date = Column(Date, nullable=False)
    overdue_days = Column(Integer, nullable=False, default=0)

    loan = relationship('Loan', back_populates='return_record')

    def __repr__(self):
        return f"<Return(id={self.return_id}, loan_id={self.loan_id}, overdue_days={self.overdue_days})>"


def _configure_sqlite(engine):
    # hand transaction control to SQLAlchemy so every transaction can start as BEGIN IMMEDIATE,
    # which takes the write lock up front and serializes read-then-write operations
    @event.listens_for(engine, 'connect')
    def on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute('PRAGMA foreign_keys = ON')
        cursor.close()

    @event.listens_for(engine, 'begin')
    def on_begin(conn):
        conn.exec_driver_sql('BEGIN IMMEDIATE')


def create_database(db_path=DEFAULT_DB_PATH, timeout=30):
    engine = create_engine(
        f'sqlite:///{db_path}',
        echo=False,
        connect_args={'timeout': timeout, 'check_same_thread': False},
    )
    _configure_sqlite(engine)
    Base.metadata.create_all(engine)
    return engine


def get_session_factory(engine):
    return sessionmaker(bind=engine, expire_on_commit=False)


def get_session(engine):
    Session = get_session_factory(engine)
    return Session()


@contextmanager
def transaction(session, action):
    """commits the session's work on success, rolls it back on any error

    database errors are logged and re-raised as StorageFailure, everything else propagates as is
    """
    try:
        yield session
        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        logger.error(f"Database error while {action}: {e}", exc_info=True)
        raise StorageFailure(f"Database error while {action}: {e}") from e
    except Exception:
        session.rollback()
        raise


if __name__ == "__main__":
    engine = create_database()
    print(f"Database created successfully: {DEFAULT_DB_PATH}")
    print("\nTables created:")
    for table in Base.metadata.tables.keys():
        print(f"  - {table}")
