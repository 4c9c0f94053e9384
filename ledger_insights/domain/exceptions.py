"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class InvalidMonthError(DomainException):
    """Month number outside 1-12"""

    pass


class InvalidBracketError(DomainException):
    """Manual tax bracket override outside the bracket table"""

    pass
