"""
Library System Reports
Read-only projections over books, members and loans returned as pandas DataFrames
"""

import logging

import pandas as pd
from sqlalchemy import select, func, distinct

import date_utils
from circulation import calculate_suspension_days
from database_models import Book, Member, Loan

logger = logging.getLogger(__name__)


def _frame(session, stmt, columns):
    rows = session.execute(stmt).all()
    return pd.DataFrame([tuple(row) for row in rows], columns=columns)


def popular_books(session, limit=10):
    loan_count = func.count(Loan.loan_id).label('loan_count')
    stmt = (
        select(Book.book_id, Book.title, Book.author, loan_count)
        .outerjoin(Loan, Loan.book_id == Book.book_id)
        .group_by(Book.book_id)
        .order_by(loan_count.desc(), Book.book_id)
        .limit(limit)
    )
    df = _frame(session, stmt, ['book_id', 'title', 'author', 'loan_count'])
    logger.info(f"Popular books report: {len(df)} books")
    return df


def active_loans(session):
    stmt = (
        select(Loan.loan_id, Book.title, Member.name, Loan.loan_date, Loan.due_date)
        .join(Book, Loan.book_id == Book.book_id)
        .join(Member, Loan.member_id == Member.member_id)
        .where(Loan.is_returned.is_(False))
        .order_by(Loan.loan_date.desc(), Loan.loan_id.desc())
    )
    return _frame(session, stmt, ['loan_id', 'title', 'member', 'loan_date', 'due_date'])


def overdue_report(session, today=None):
    """open loans past their due date, most overdue first, with the suspension each would earn"""
    today = date_utils.as_date(today) if today is not None else date_utils.today()

    df = active_loans(session)
    is_late = pd.Series([due < today for due in df['due_date']], index=df.index, dtype=bool)
    df = df[is_late].copy()

    df['overdue_days'] = [date_utils.diff_days(due, today) for due in df['due_date']]
    df['suspension_days'] = [calculate_suspension_days(days) for days in df['overdue_days']]
    df = df.sort_values(['overdue_days', 'loan_id'], ascending=[False, True]).reset_index(drop=True)

    logger.info(f"Overdue report: {len(df)} overdue loans as of {date_utils.format_date(today)}")
    return df


def stock_status(session):
    stmt = select(Book.book_id, Book.title, Book.author, Book.quantity, Book.available).order_by(Book.book_id)
    df = _frame(session, stmt, ['book_id', 'title', 'author', 'quantity', 'available'])
    df['on_loan'] = df['quantity'] - df['available']
    return df


def member_statistics(session, today=None):
    today = date_utils.as_date(today) if today is not None else date_utils.today()

    total = session.execute(select(func.count(Member.member_id))).scalar_one()
    overdue = session.execute(
        select(func.count(distinct(Loan.member_id)))
        .where(Loan.is_returned.is_(False), Loan.due_date < today)
    ).scalar_one()

    return {'total_members': total, 'overdue_members': overdue}
