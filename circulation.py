"""
Library System Circulation
Loan issuance and return processing, overdue computation and the suspension rule

Each of issue_loan and return_loan is one transaction: every check and write happens between a single
begin and a single commit, and any failure rolls the whole operation back.
"""

import logging

from sqlalchemy import select

import catalog
import date_utils
from database_models import Loan, Return, transaction
from errors import NotFound, BookUnavailable, MemberSuspended, AlreadyReturned

logger = logging.getLogger(__name__)

DEFAULT_LOAN_PERIOD = 14
SUSPENSION_MULTIPLIER = 2

DEFAULT_LIST_LIMIT = 100


def calculate_suspension_days(overdue_days):
    if overdue_days <= 0:
        return 0
    return overdue_days * SUSPENSION_MULTIPLIER


def _resolve_today(today):
    return date_utils.as_date(today) if today is not None else date_utils.today()


def is_overdue(loan, today=None):
    """returns (is_overdue, overdue_days) for an open loan, (False, 0) once it is returned"""
    if loan.is_returned:
        return False, 0
    days = max(0, date_utils.diff_days(loan.due_date, _resolve_today(today)))
    return days > 0, days


def member_overdue_days(session, member_id, today=None):
    """largest number of days any of the member's open loans is past due, 0 if none are"""
    today = _resolve_today(today)
    due_dates = session.execute(
        select(Loan.due_date).where(Loan.member_id == member_id, Loan.is_returned.is_(False))
    ).scalars().all()
    return max((max(0, date_utils.diff_days(due, today)) for due in due_dates), default=0)


def issue_loan(session, book_id, member_id, loan_period_days=DEFAULT_LOAN_PERIOD, today=None):
    if loan_period_days is None or loan_period_days <= 0:
        logger.info(f"Loan period {loan_period_days} is not positive, using default of {DEFAULT_LOAN_PERIOD} days")
        loan_period_days = DEFAULT_LOAN_PERIOD

    loan_date = _resolve_today(today)
    due_date = date_utils.add_days(loan_date, loan_period_days)

    try:
        with transaction(session, f"issuing book {book_id} to member {member_id}"):
            # members are checked before books, first failure wins
            catalog.get_member(session, member_id)
            overdue_days = member_overdue_days(session, member_id, loan_date)
            if overdue_days > 0:
                raise MemberSuspended(member_id, overdue_days)

            if catalog.book_available(session, book_id) <= 0:
                raise BookUnavailable(book_id)

            loan = Loan(
                book_id=book_id,
                member_id=member_id,
                loan_date=loan_date,
                due_date=due_date,
                is_returned=False,
            )
            session.add(loan)
            session.flush()

            catalog.set_book_available(session, book_id, -1)
    except (NotFound, MemberSuspended, BookUnavailable) as e:
        logger.warning(f"Loan rejected: {e}")
        raise

    logger.info(
        f"Loan processed successfully (Loan ID: {loan.loan_id}) - "
        f"Loan Date: {date_utils.format_date(loan_date)}, Due Date: {date_utils.format_date(due_date)}"
    )
    return loan.loan_id


def return_loan(session, loan_id, today=None):
    return_date = _resolve_today(today)

    try:
        with transaction(session, f"returning loan {loan_id}"):
            loan = get_loan(session, loan_id)
            if loan.is_returned:
                raise AlreadyReturned(loan_id)

            overdue_days = max(0, date_utils.diff_days(loan.due_date, return_date))

            record = Return(loan_id=loan_id, return_date=return_date, overdue_days=overdue_days)
            session.add(record)
            loan.is_returned = True
            session.flush()

            catalog.set_book_available(session, loan.book_id, 1)

            suspension_days = calculate_suspension_days(overdue_days)
            if suspension_days > 0:
                catalog.apply_suspension(session, loan.member_id, suspension_days)
    except (NotFound, AlreadyReturned) as e:
        logger.warning(f"Return rejected: {e}")
        raise

    logger.info(
        f"Return processed successfully (Return ID: {record.return_id}) - "
        f"Return Date: {date_utils.format_date(return_date)}"
    )
    if overdue_days > 0:
        logger.warning(
            f"Loan {loan_id} returned {overdue_days} days overdue. Suspension period: {suspension_days} days"
        )
    return record.return_id


def get_loan(session, loan_id):
    loan = session.get(Loan, loan_id, populate_existing=True)
    if loan is None:
        raise NotFound('Loan', loan_id)
    return loan


def get_return(session, return_id):
    record = session.get(Return, return_id, populate_existing=True)
    if record is None:
        raise NotFound('Return', return_id)
    return record


def check_loan_overdue(session, loan_id, today=None):
    return is_overdue(get_loan(session, loan_id), today)


def get_member_status(session, member_id, today=None):
    member = catalog.get_member(session, member_id)
    overdue_days = member_overdue_days(session, member_id, today)
    return {
        'member_id': member.member_id,
        'name': member.name,
        'overdue_days': overdue_days,
        'suspension_days': calculate_suspension_days(overdue_days),
        'penalty_days': member.penalty_days,
        'can_borrow': overdue_days == 0,
    }


def _loans(session, *criteria, order_by=None, limit=DEFAULT_LIST_LIMIT):
    if order_by is None:
        order_by = (Loan.loan_date.desc(), Loan.loan_id.desc())
    stmt = select(Loan).where(*criteria).order_by(*order_by).limit(limit)
    return session.execute(stmt).scalars().all()


def get_active_loans_by_member(session, member_id, limit=DEFAULT_LIST_LIMIT):
    return _loans(session, Loan.member_id == member_id, Loan.is_returned.is_(False), limit=limit)


def get_active_loans_by_book(session, book_id, limit=DEFAULT_LIST_LIMIT):
    return _loans(session, Loan.book_id == book_id, Loan.is_returned.is_(False), limit=limit)


def get_overdue_loans(session, today=None, limit=DEFAULT_LIST_LIMIT):
    today = _resolve_today(today)
    return _loans(
        session,
        Loan.is_returned.is_(False),
        Loan.due_date < today,
        order_by=(Loan.due_date.asc(), Loan.loan_id.asc()),
        limit=limit,
    )


def get_loan_history_by_member(session, member_id, limit=DEFAULT_LIST_LIMIT):
    return _loans(session, Loan.member_id == member_id, limit=limit)


def get_loan_history_by_book(session, book_id, limit=DEFAULT_LIST_LIMIT):
    return _loans(session, Loan.book_id == book_id, limit=limit)
