"""
Pytest tests for library_cli.py
Tests argument parsing and scripted menu sessions against a temporary database
"""

import pytest

import catalog
import circulation
import library_cli


def scripted(answers):
    """returns a read function that replays answers and then behaves like a closed stdin"""
    remaining = list(answers)

    def read(prompt=''):
        if not remaining:
            raise EOFError
        return remaining.pop(0)

    return read


def test_parse_arguments_defaults():
    args = library_cli.parse_arguments([])

    assert args.db_path == 'library_circulation.db'
    assert args.loan_period == 14
    assert args.log_file == 'library_circulation.log'
    assert args.report is None


def test_parse_arguments_overrides():
    args = library_cli.parse_arguments(['--db-path', 'x.db', '--loan-period', '21', '--report', 'overdue'])

    assert args.db_path == 'x.db'
    assert args.loan_period == 21
    assert args.report == 'overdue'


def test_parse_arguments_rejects_unknown_report():
    with pytest.raises(SystemExit):
        library_cli.parse_arguments(['--report', 'everything'])


def test_menu_issues_and_returns_a_loan(session_factory, book_id, member_id, session):
    session.close()
    output = []
    read = scripted([
        '3', '1', str(book_id), str(member_id), '',   # issue with the default period
        '2', '1',                                   # return loan 1
        '0', '0',
    ])

    library_cli.run_menu(session_factory, loan_period=10, read=read, write=output.append)

    text = '\n'.join(output)
    assert 'Loan issued (Loan ID: 1)' in text
    assert 'Book returned (Return ID: 1)' in text
    assert 'Goodbye.' in text

    with session_factory() as check:
        loan = circulation.get_loan(check, 1)
        assert (loan.due_date - loan.loan_date).days == 10
        assert loan.is_returned is True
        assert catalog.book_available(check, book_id) == 2


def test_menu_reports_errors_and_keeps_running(session_factory, member_id, session):
    session.close()
    output = []
    read = scripted([
        '3', '1', '999', str(member_id), '14',   # unknown book
        '2', 'abc',                              # not a number
        '0', '0',
    ])

    library_cli.run_menu(session_factory, read=read, write=output.append)

    text = '\n'.join(output)
    assert 'Error: Book not found (ID: 999)' in text
    assert 'Please enter a number.' in text
    assert 'Goodbye.' in text


def test_menu_survives_loan_period_past_the_calendar(session_factory, book_id, member_id, session):
    session.close()
    output = []
    read = scripted([
        '3', '1', str(book_id), str(member_id), '10000000',
        '0', '0',
    ])

    library_cli.run_menu(session_factory, read=read, write=output.append)

    text = '\n'.join(output)
    assert 'Error: Invalid date' in text
    assert 'Goodbye.' in text

    with session_factory() as check:
        assert catalog.book_available(check, book_id) == 2


def test_menu_adds_book_and_member(session_factory, session):
    session.close()
    output = []
    read = scripted([
        '1', '1', 'Dune', 'Frank Herbert', 'Ace', '1965', '978-0441013593', 'Science Fiction', '3', '0',
        '2', '1', 'Alice Kim', '010-1234-5678', 'Seoul', '0',
        '0',
    ])

    library_cli.run_menu(session_factory, read=read, write=output.append)

    with session_factory() as check:
        books = catalog.list_books(check)
        assert [(b.title, b.quantity, b.available) for b in books] == [('Dune', 3, 3)]
        assert catalog.get_member_count(check) == 1


def test_menu_stops_at_end_of_input(session_factory, session):
    session.close()
    output = []

    library_cli.run_menu(session_factory, read=scripted(['4']), write=output.append)

    assert library_cli.REPORT_MENU in output


def test_print_report_member_statistics(session, member_id):
    output = []
    library_cli.print_report(session, 'members', output.append)

    assert output == ['Total members: 1', 'Members with overdue loans: 0']
