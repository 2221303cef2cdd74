"""
The `helpers` package provides utilities that support database operations.

Contents
--------
- transactionManagement
    - `db_session_context`: context variable carrying the active session
    - `@transactional`: runs a function in a managed transaction, reusing an
      outer session when one is active, committing on success and rolling
      back on any error
- timeutils
    - `utcnow()`: timezone-aware "now"
    - `as_utc(value)`: normalizes timestamps read back from backends that drop
      the timezone (SQLite)
"""
