"""
Raffles App - Raffle Bookkeeping

Raffles (fundraising draws) with their ticket sales and costs. Costs may be
regular expenses, donations, or reimbursements advanced by a member that
are tracked until paid back.
"""
