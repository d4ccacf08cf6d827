"""REST backend for accounts, transactions and saved places."""
