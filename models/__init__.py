from models.application import LoanApplication
from models.borrower import BorrowerProfile
from models.document import Document

__all__ = [
    "BorrowerProfile",
    "Document",
    "LoanApplication",
]
