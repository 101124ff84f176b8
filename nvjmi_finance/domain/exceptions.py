"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class PlanNotFoundError(DomainException):
    """Plan does not exist or belongs to another user"""

    pass


class InstallmentNotFoundError(DomainException):
    """No installment with the requested sequence in the plan"""

    pass


class InvalidScheduleError(DomainException):
    """Schedule has sequence gaps/duplicates or non-positive amounts"""

    pass


class ScheduleSaveError(DomainException):
    """Persisting a plan or replacing its installment batch failed"""

    pass
