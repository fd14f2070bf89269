from confidential_vote.database.models import FeeEntry
from confidential_vote.operations.fee_ledger import FeeLedger
from election_helpers import ADMIN, ELECTION, REGISTRATION_FEE, VOTER1, VOTER2

OTHER_ELECTION = '0xe7f1725e7734ce288f8367e1bb143e90bb3f0512'


def test_collect_exact_fee(app_ctx):
    ledger = FeeLedger(ELECTION)
    assert ledger.collect(VOTER1, REGISTRATION_FEE, REGISTRATION_FEE) == 0
    assert ledger.balance() == REGISTRATION_FEE
    assert FeeEntry.query.filter_by(kind=FeeEntry.REFUND).count() == 0


def test_collect_refunds_excess(app_ctx):
    ledger = FeeLedger(ELECTION)
    assert ledger.collect(VOTER1, REGISTRATION_FEE + 7, REGISTRATION_FEE) == 7
    assert ledger.balance() == REGISTRATION_FEE
    refund = FeeEntry.query.filter_by(kind=FeeEntry.REFUND).one()
    assert refund.principal == VOTER1
    assert refund.amount == 7


def test_withdraw_empties_balance(app_ctx):
    ledger = FeeLedger(ELECTION)
    ledger.collect(VOTER1, REGISTRATION_FEE, REGISTRATION_FEE)
    ledger.collect(VOTER2, REGISTRATION_FEE, REGISTRATION_FEE)
    assert ledger.withdraw(ADMIN, ledger.balance()) == REGISTRATION_FEE * 2
    assert ledger.balance() == 0


def test_balances_are_per_election(app_ctx):
    FeeLedger(ELECTION).collect(VOTER1, REGISTRATION_FEE, REGISTRATION_FEE)
    assert FeeLedger(OTHER_ELECTION).balance() == 0
    assert FeeLedger(ELECTION.upper().replace('0X', '0x')).balance() == REGISTRATION_FEE


def test_amounts_beyond_64_bits(app_ctx):
    ledger = FeeLedger(ELECTION)
    paid = 10 * 10 ** 18
    assert ledger.collect(VOTER1, paid, REGISTRATION_FEE) == paid - REGISTRATION_FEE
    ledger.collect(VOTER2, 2 ** 256 - 1, 2 ** 255)
    assert ledger.balance() == REGISTRATION_FEE + 2 ** 255
    assert ledger.withdraw(ADMIN, ledger.balance()) == REGISTRATION_FEE + 2 ** 255
    assert ledger.balance() == 0
    deposit = FeeEntry.query.filter_by(kind=FeeEntry.DEPOSIT, principal=VOTER2).one()
    assert deposit.amount == 2 ** 256 - 1
