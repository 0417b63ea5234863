"""
History App - Audit Trail and Undo

Append-only ledger of every raffle, sale and cost mutation, with before and
after snapshots, and one-time undo of any entry.
"""
