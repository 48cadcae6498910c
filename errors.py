"""
Library System Errors
Exception kinds raised by the date helpers, catalog accessors and circulation engine
"""


class LibraryError(Exception):
    """base class for every error the library modules raise on purpose"""


class NotFound(LibraryError):

    def __init__(self, entity, entity_id):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} not found (ID: {entity_id})")


class BookUnavailable(LibraryError):

    def __init__(self, book_id):
        self.book_id = book_id
        super().__init__(f"Book {book_id} is not available for loan")


class MemberSuspended(LibraryError):

    def __init__(self, member_id, overdue_days):
        self.member_id = member_id
        self.overdue_days = overdue_days
        super().__init__(
            f"Member {member_id} is suspended due to overdue books ({overdue_days} days overdue)"
        )


class AlreadyReturned(LibraryError):

    def __init__(self, loan_id):
        self.loan_id = loan_id
        super().__init__(f"Loan {loan_id} has already been returned")


class InvalidFormat(LibraryError, ValueError):

    def __init__(self, value, reason='expected YYYY-MM-DD'):
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid date '{value}': {reason}")


class StorageFailure(LibraryError):
    """raised after a rollback when the database rejects a write or read"""
