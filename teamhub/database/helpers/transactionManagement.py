"""
Database Transaction Management
===============================

This module provides utilities for managing SQLAlchemy database sessions
using Python context variables and a decorator-based transaction wrapper.

Every service function in ``teamhub.database.core`` is decorated with
``@transactional``; one decorated call is one unit of work. Multi-step writes
such as cascading deletes therefore commit or roll back as a whole.

Key features
~~~~~~~~~~~~
- Context variable to store the active session
- Implicit reuse of existing sessions (nested calls join the outer transaction)
- Automatic commit and rollback handling
- Clean session closure after execution

Threading
~~~~~~~~~
The real-time layer calls decorated functions through Starlette's
``run_in_threadpool``; the worker thread runs in a copy of the caller's
context, so sessions never leak between concurrent tasks.
"""

import contextvars
import logging
from functools import wraps

from sqlalchemy.orm import sessionmaker

from teamhub.database.config.connection_engine import connection_engine

logger = logging.getLogger(__name__)

SessionFactory = sessionmaker(bind=connection_engine, expire_on_commit=False)
"""Session factory bound to the application engine."""

db_session_context = contextvars.ContextVar("db_session_context", default=None)
"""Context variable storing the active SQLAlchemy session."""


def transactional(func):
    """
    Decorator to wrap functions in a managed SQLAlchemy transaction.

    Ensures that:
    - If a session already exists in context, it is reused.
    - Otherwise, a new session is created, committed, and closed.
    - On errors, the session is rolled back and the error re-raised.

    Parameters
    ----------
    func : callable
        The function to wrap. It must accept a `session` keyword argument.

    Returns
    -------
    callable
        The wrapped function, executed within a database transaction.

    Example
    -------
    >>> @transactional
    ... def rename_team(team_id, name, session=None):
    ...     session.get(Team, team_id).name = name
    """
    @wraps(func)
    def wrap_func(*args, **kwargs):
        session = db_session_context.get()
        if session is not None:
            return func(*args, session=session, **kwargs)

        session = SessionFactory()
        token = db_session_context.set(session)

        try:
            result = func(*args, session=session, **kwargs)
            session.flush()
            session.commit()
        except Exception:
            logger.debug("transaction.rollback func=%s", func.__qualname__)
            session.rollback()
            raise
        finally:
            session.close()
            db_session_context.reset(token)

        return result

    return wrap_func
