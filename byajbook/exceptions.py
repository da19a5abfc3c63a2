class ByajBookError(Exception):
    """Base class for ledger and dialogue errors."""


class PersistenceError(ByajBookError):
    """The ledger store could not read or write its data."""


class PaymentRejected(ByajBookError):
    """A payment failed validation against the loan it targets."""


class IncompleteDraftError(ByajBookError):
    """A draft was committed before every required slot was filled."""

    def __init__(self, missing):
        self.missing = list(missing)
        super().__init__(f"Draft is missing slots: {', '.join(self.missing)}")
