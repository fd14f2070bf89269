# confidential_vote/database/models.py

from datetime import datetime, timezone

from confidential_vote import db

# Fee bookkeeping for registrations. Amounts are in wei and may span the
# full uint256 range, so they are stored as decimal strings.

WEI_DIGITS = 78


def _utcnow():
    return datetime.now(timezone.utc)


class FeeEntry(db.Model):
    __tablename__ = 'fee_entries'
    DEPOSIT = 'deposit'
    REFUND = 'refund'
    WITHDRAWAL = 'withdrawal'

    id = db.Column(db.Integer, primary_key=True)
    account = db.Column(db.String(42), nullable=False, index=True)  # election address
    principal = db.Column(db.String(42), nullable=False)
    kind = db.Column(db.String(16), nullable=False)
    amount_wei = db.Column('amount', db.String(WEI_DIGITS), nullable=False)
    timestamp = db.Column(db.DateTime, default=_utcnow)

    @property
    def amount(self):
        return int(self.amount_wei)

    @amount.setter
    def amount(self, value):
        self.amount_wei = str(int(value))

    def __repr__(self):
        return f'<FeeEntry {self.kind} {self.amount_wei} {self.principal}>'
