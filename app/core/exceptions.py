class LedgerIntegrityError(ValueError):
    """Raised when the transactions or balances of a group cannot be settled.

    This points at bad data in the expense store (empty roster, non-positive
    amounts, balances that do not net to zero), not at a bad request.
    """
