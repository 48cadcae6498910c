"""
Library System Menu
Text menu for books, members, loans and reports - using argparse for database path, loan period and log file
"""

import argparse
import logging

import catalog
import circulation
import date_utils
import reports
from database_models import DEFAULT_DB_PATH, create_database, get_session_factory
from errors import LibraryError

DEFAULT_LOG_PATH = 'library_circulation.log'

logger = logging.getLogger(__name__)

REPORTS = ('popular', 'active', 'overdue', 'stock', 'members')


def configure_logging(log_path=DEFAULT_LOG_PATH, level=logging.INFO):
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(levelname)s - %(message)s',
        handlers=[
            logging.FileHandler(log_path),
            logging.StreamHandler()
        ]
    )


def parse_arguments(argv=None):
    parser = argparse.ArgumentParser(
        description='Library Circulation System'
    )

    parser.add_argument(
        '--db-path',
        default=DEFAULT_DB_PATH,
        help=f'Path for SQLite database (default: {DEFAULT_DB_PATH})'
    )

    parser.add_argument(
        '--loan-period',
        type=int,
        default=circulation.DEFAULT_LOAN_PERIOD,
        help=f'Number of days allowed for borrowing (default: {circulation.DEFAULT_LOAN_PERIOD})'
    )

    parser.add_argument(
        '--log-file',
        default=DEFAULT_LOG_PATH,
        help=f'Path for the circulation log (default: {DEFAULT_LOG_PATH})'
    )

    parser.add_argument(
        '--report',
        choices=REPORTS,
        help='Print a single report and exit instead of starting the menu'
    )

    return parser.parse_args(argv)


# input helpers

def ask_text(read, label):
    return read(f"{label}: ").strip()


def ask_int(read, write, label, default=None):
    raw = ask_text(read, label)
    if raw == '' and default is not None:
        return default
    try:
        return int(raw)
    except ValueError:
        write("Please enter a number.")
        return None


def ask_optional(read, label):
    """returns None for an empty answer so the field is left unchanged"""
    value = ask_text(read, f"{label} (leave empty to keep)")
    return value or None


def show_books(write, books):
    if not books:
        write("No books found.")
        return
    write(f"{'ID':<6} {'Title':<30} {'Author':<20} {'ISBN':<15} {'Genre':<12} {'Avail':>5}")
    for book in books:
        write(f"{book.book_id:<6} {book.title[:30]:<30} {book.author[:20]:<20} {book.isbn:<15} "
              f"{book.genre[:12]:<12} {book.available:>2}/{book.quantity:<2}")
    write(f"Total: {len(books)} books")


def show_members(write, members):
    if not members:
        write("No members found.")
        return
    write(f"{'ID':<6} {'Name':<20} {'Phone':<15} {'Registered':<12}")
    for member in members:
        write(f"{member.member_id:<6} {member.name[:20]:<20} {member.phone:<15} "
              f"{date_utils.format_date(member.registration_date):<12}")
    write(f"Total: {len(members)} members")


def show_loans(write, loans, today=None):
    if not loans:
        write("No loans found.")
        return
    write(f"{'Loan':<6} {'Book':<6} {'Member':<7} {'Loan Date':<12} {'Due Date':<12} Status")
    for loan in loans:
        late, days = circulation.is_overdue(loan, today)
        status = 'RETURNED' if loan.is_returned else (f'OVERDUE {days}d' if late else 'ON LOAN')
        write(f"{loan.loan_id:<6} {loan.book_id:<6} {loan.member_id:<7} "
              f"{date_utils.format_date(loan.loan_date):<12} {date_utils.format_date(loan.due_date):<12} {status}")
    write(f"Total: {len(loans)} loans")


def show_frame(write, df):
    if df.empty:
        write("No rows.")
    else:
        write(df.to_string(index=False))


# menus

BOOK_MENU = """
===== Book Management =====
1. Add book
2. Search books
3. Update book
4. Delete book
5. List all books
6. Search by genre
7. Search by author
0. Back"""

MEMBER_MENU = """
===== Member Management =====
1. Add member
2. Search members by name
3. View member (ID)
4. Update member
5. Delete member
6. List all members
7. Check overdue status
0. Back"""

LOAN_MENU = """
===== Loans & Returns =====
1. Issue loan
2. Return book
3. Active loans for member
4. All active loans
5. Overdue loans
6. Loan history (member)
7. Loan history (book)
0. Back"""

REPORT_MENU = """
===== Reports =====
1. Top 10 popular books
2. Overdue report
3. Stock status
4. Member statistics
0. Back"""

MAIN_MENU = """
===== Library Circulation System =====
1. Book management
2. Member management
3. Loans & returns
4. Reports
0. Exit"""


def handle_book_choice(session, choice, read, write):
    if choice == 1:
        title = ask_text(read, "Title")
        author = ask_text(read, "Author")
        publisher = ask_text(read, "Publisher")
        year = ask_int(read, write, "Publication year", default=0)
        isbn = ask_text(read, "ISBN")
        genre = ask_text(read, "Genre")
        quantity = ask_int(read, write, "Quantity", default=1)
        if year is None or quantity is None:
            return
        book_id = catalog.add_book(session, title, isbn, author, publisher, year or None, genre, quantity)
        write(f"Book added (ID: {book_id})")
    elif choice == 2:
        show_books(write, catalog.search_books(session, ask_text(read, "Keyword")))
    elif choice == 3:
        book_id = ask_int(read, write, "Book ID")
        if book_id is None:
            return
        year = ask_optional(read, "Publication year")
        book = catalog.update_book(
            session, book_id,
            title=ask_optional(read, "Title"),
            author=ask_optional(read, "Author"),
            publisher=ask_optional(read, "Publisher"),
            publication_year=int(year) if year and year.isdigit() else None,
            genre=ask_optional(read, "Genre"),
        )
        write(f"Book updated: {book.title}")
    elif choice == 4:
        book_id = ask_int(read, write, "Book ID")
        if book_id is not None:
            catalog.delete_book(session, book_id)
            write("Book deleted.")
    elif choice == 5:
        show_books(write, catalog.list_books(session))
    elif choice == 6:
        show_books(write, catalog.search_books_by_genre(session, ask_text(read, "Genre")))
    elif choice == 7:
        show_books(write, catalog.search_books_by_author(session, ask_text(read, "Author")))
    else:
        write("Invalid choice.")


def handle_member_choice(session, choice, read, write):
    if choice == 1:
        name = ask_text(read, "Name")
        phone = ask_text(read, "Phone")
        address = ask_text(read, "Address")
        member_id = catalog.add_member(session, name, phone, address)
        write(f"Member added (ID: {member_id})")
    elif choice == 2:
        show_members(write, catalog.search_members_by_name(session, ask_text(read, "Name")))
    elif choice == 3:
        member_id = ask_int(read, write, "Member ID")
        if member_id is None:
            return
        status = circulation.get_member_status(session, member_id)
        member = catalog.get_member(session, member_id)
        write(f"ID: {member.member_id}")
        write(f"Name: {member.name}")
        write(f"Phone: {member.phone}")
        write(f"Address: {member.address}")
        write(f"Registered: {date_utils.format_date(member.registration_date)}")
        write(f"Overdue days: {status['overdue_days']}")
        if status['overdue_days'] > 0:
            write(f"Suspension days: {status['suspension_days']}")
    elif choice == 4:
        member_id = ask_int(read, write, "Member ID")
        if member_id is None:
            return
        member = catalog.update_member(
            session, member_id,
            name=ask_optional(read, "Name"),
            phone=ask_optional(read, "Phone"),
            address=ask_optional(read, "Address"),
        )
        write(f"Member updated: {member.name}")
    elif choice == 5:
        member_id = ask_int(read, write, "Member ID")
        if member_id is not None:
            catalog.delete_member(session, member_id)
            write("Member deleted.")
    elif choice == 6:
        show_members(write, catalog.list_members(session))
    elif choice == 7:
        member_id = ask_int(read, write, "Member ID")
        if member_id is None:
            return
        status = circulation.get_member_status(session, member_id)
        if status['overdue_days'] > 0:
            write(f"Member {member_id} is overdue by {status['overdue_days']} days "
                  f"(suspension: {status['suspension_days']} days)")
        else:
            write(f"Member {member_id} has no overdue loans and can borrow.")
    else:
        write("Invalid choice.")


def handle_loan_choice(session, choice, read, write, loan_period):
    if choice == 1:
        book_id = ask_int(read, write, "Book ID")
        member_id = ask_int(read, write, "Member ID")
        period = ask_int(read, write, f"Loan period in days [{loan_period}]", default=loan_period)
        if book_id is None or member_id is None or period is None:
            return
        loan_id = circulation.issue_loan(session, book_id, member_id, period)
        loan = circulation.get_loan(session, loan_id)
        write(f"Loan issued (Loan ID: {loan_id}), due {date_utils.format_date(loan.due_date)}")
    elif choice == 2:
        loan_id = ask_int(read, write, "Loan ID")
        if loan_id is None:
            return
        return_id = circulation.return_loan(session, loan_id)
        record = circulation.get_return(session, return_id)
        write(f"Book returned (Return ID: {return_id})")
        if record.overdue_days > 0:
            write(f"Overdue by {record.overdue_days} days. Suspension period: "
                  f"{circulation.calculate_suspension_days(record.overdue_days)} days")
    elif choice == 3:
        member_id = ask_int(read, write, "Member ID")
        if member_id is not None:
            show_loans(write, circulation.get_active_loans_by_member(session, member_id))
    elif choice == 4:
        show_frame(write, reports.active_loans(session))
    elif choice == 5:
        show_loans(write, circulation.get_overdue_loans(session))
    elif choice == 6:
        member_id = ask_int(read, write, "Member ID")
        if member_id is not None:
            show_loans(write, circulation.get_loan_history_by_member(session, member_id))
    elif choice == 7:
        book_id = ask_int(read, write, "Book ID")
        if book_id is not None:
            show_loans(write, circulation.get_loan_history_by_book(session, book_id))
    else:
        write("Invalid choice.")


def print_report(session, name, write):
    if name == 'popular':
        show_frame(write, reports.popular_books(session, 10))
    elif name == 'active':
        show_frame(write, reports.active_loans(session))
    elif name == 'overdue':
        show_frame(write, reports.overdue_report(session))
    elif name == 'stock':
        show_frame(write, reports.stock_status(session))
    elif name == 'members':
        stats = reports.member_statistics(session)
        write(f"Total members: {stats['total_members']}")
        write(f"Members with overdue loans: {stats['overdue_members']}")


def handle_report_choice(session, choice, read, write):
    names = {1: 'popular', 2: 'overdue', 3: 'stock', 4: 'members'}
    if choice not in names:
        write("Invalid choice.")
        return
    print_report(session, names[choice], write)


def run_submenu(Session, menu_text, handler, read, write):
    while True:
        write(menu_text)
        choice = ask_int(read, write, "Select")
        if choice is None:
            continue
        if choice == 0:
            return
        # one session per action so each operation is its own transaction
        with Session() as session:
            try:
                handler(session, choice, read, write)
            except (LibraryError, ValueError) as e:
                write(f"Error: {e}")


def run_menu(Session, loan_period=circulation.DEFAULT_LOAN_PERIOD, read=input, write=print):
    def loan_handler(session, choice, read, write):
        handle_loan_choice(session, choice, read, write, loan_period)

    submenus = {
        1: (BOOK_MENU, handle_book_choice),
        2: (MEMBER_MENU, handle_member_choice),
        3: (LOAN_MENU, loan_handler),
        4: (REPORT_MENU, handle_report_choice),
    }

    try:
        while True:
            write(MAIN_MENU)
            choice = ask_int(read, write, "Select")
            if choice is None:
                continue
            if choice == 0:
                write("Goodbye.")
                return
            if choice not in submenus:
                write("Invalid choice.")
                continue
            menu_text, handler = submenus[choice]
            run_submenu(Session, menu_text, handler, read, write)
    except EOFError:
        write("")


def main(argv=None):
    args = parse_arguments(argv)
    configure_logging(args.log_file)

    logger.info("=" * 60)
    logger.info("Library Circulation System Started")
    logger.info("=" * 60)
    logger.info(f"Database: {args.db_path}, loan period: {args.loan_period} days")

    engine = create_database(args.db_path)
    Session = get_session_factory(engine)

    try:
        if args.report:
            with Session() as session:
                print_report(session, args.report, print)
        else:
            run_menu(Session, args.loan_period)
    finally:
        engine.dispose()
        logger.info("Library Circulation System Stopped")


if __name__ == "__main__":
    main()
