# confidential_vote/operations/fee_ledger.py

import logging

from confidential_vote import db
from confidential_vote.database.models import FeeEntry

logger = logging.getLogger(__name__)


class FeeLedger:
    """Plain credit/debit bookkeeping of registration fees for one election.

    Each public method commits its rows in a single transaction.
    """

    def __init__(self, account):
        self.account = account.lower()

    def _entry(self, principal, kind, amount):
        return FeeEntry(account=self.account, principal=principal, kind=kind, amount=amount)

    def collect(self, principal, paid, required):
        """Take `paid` from `principal`, refund anything above `required`."""
        refund = paid - required
        try:
            db.session.add(self._entry(principal, FeeEntry.DEPOSIT, paid))
            if refund > 0:
                db.session.add(self._entry(principal, FeeEntry.REFUND, refund))
            db.session.commit()
        except Exception:
            db.session.rollback()
            raise
        logger.info(f"Collected {required} wei from {principal}, refunded {max(refund, 0)}")
        return max(refund, 0)

    def balance(self):
        # summed here rather than in SQL: amounts are decimal strings
        rows = (
            db.session.query(FeeEntry.kind, FeeEntry.amount_wei)
            .filter(FeeEntry.account == self.account)
            .all()
        )
        totals = {}
        for kind, amount in rows:
            totals[kind] = totals.get(kind, 0) + int(amount)
        return (totals.get(FeeEntry.DEPOSIT, 0)
                - totals.get(FeeEntry.REFUND, 0)
                - totals.get(FeeEntry.WITHDRAWAL, 0))

    def withdraw(self, to, amount):
        try:
            db.session.add(self._entry(to, FeeEntry.WITHDRAWAL, amount))
            db.session.commit()
        except Exception:
            db.session.rollback()
            raise
        logger.info(f"Withdrew {amount} wei to {to}")
        return amount
