"""
Outstanding balances between trip members.

Every unpaid split is a debt from the split's user to the expense's payer.
Balances are derived on read and never stored; settling still happens only
by marking splits paid.
"""
from sqlalchemy.orm import Session
from typing import Dict, List, Tuple
from decimal import Decimal
from tripledger.models.expense import Expense, ExpenseSplit
from tripledger.services.access_service import authorize


class Transfer:
    """Represents a single suggested transfer between users."""
    def __init__(self, from_user_id: int, to_user_id: int, amount: Decimal):
        self.from_user_id = from_user_id
        self.to_user_id = to_user_id
        self.amount = amount


def net_balances(db: Session, trip_id: int) -> Dict[int, Decimal]:
    """user_id -> net balance (positive = is owed, negative = owes)."""
    rows = db.query(ExpenseSplit.user_id, ExpenseSplit.amount, Expense.paid_by).join(
        Expense, ExpenseSplit.expense_id == Expense.id
    ).filter(
        Expense.trip_id == trip_id,
        ExpenseSplit.paid.is_(False)
    ).all()

    balances: Dict[int, Decimal] = {}
    for debtor_id, amount, payer_id in rows:
        if debtor_id == payer_id:
            continue
        amount = Decimal(str(amount))
        balances[payer_id] = balances.get(payer_id, Decimal(0)) + amount
        balances[debtor_id] = balances.get(debtor_id, Decimal(0)) - amount
    return balances


def minimize_transfers(balances: List[Tuple[int, Decimal]]) -> List[Transfer]:
    """
    Minimize the number of transfers needed to clear the balances.
    Uses a greedy algorithm: the largest debtor pays the largest creditor.
    """
    creditors = [(uid, bal) for uid, bal in balances if bal > 0]
    debtors = [(uid, -bal) for uid, bal in balances if bal < 0]

    creditors.sort(key=lambda x: x[1], reverse=True)
    debtors.sort(key=lambda x: x[1], reverse=True)

    transfers = []
    cred_idx = 0
    debt_idx = 0

    while cred_idx < len(creditors) and debt_idx < len(debtors):
        creditor_id, cred_amount = creditors[cred_idx]
        debtor_id, debt_amount = debtors[debt_idx]

        transfer_amount = min(cred_amount, debt_amount)
        transfers.append(Transfer(debtor_id, creditor_id, transfer_amount))

        creditors[cred_idx] = (creditor_id, cred_amount - transfer_amount)
        debtors[debt_idx] = (debtor_id, debt_amount - transfer_amount)

        if creditors[cred_idx][1] == 0:
            cred_idx += 1
        if debtors[debt_idx][1] == 0:
            debt_idx += 1

    return transfers


def outstanding_balances(db: Session, trip_id: int, user_id: int) -> dict:
    """Balances and suggested transfers for a trip the user can view."""
    trip, _ = authorize(db, trip_id, user_id, "can_view")

    balances = net_balances(db, trip_id)
    transfers = minimize_transfers(sorted(balances.items()))

    return {
        "trip_id": trip_id,
        "currency": trip.currency,
        "balances": [
            {"user_id": uid, "balance": bal}
            for uid, bal in sorted(balances.items())
            if bal != 0
        ],
        "transfers": [
            {"from_user_id": t.from_user_id, "to_user_id": t.to_user_id, "amount": t.amount}
            for t in transfers
        ],
    }
