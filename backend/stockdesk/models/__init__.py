from .inventory import Product
from .sales import Transaction, TransactionItem
from .khata import Contact, LedgerEntry, CONTACT_TYPES, ENTRY_TYPES

__all__ = [
    'Product',
    'Transaction', 'TransactionItem',
    'Contact', 'LedgerEntry', 'CONTACT_TYPES', 'ENTRY_TYPES',
]
