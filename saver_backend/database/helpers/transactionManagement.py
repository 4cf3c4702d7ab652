"""
Database Transaction Management
===============================

Utilities for managing SQLAlchemy database sessions using Python context
variables and a decorator-based transaction wrapper.

A session is propagated implicitly across function calls. Functions decorated
with ``@transactional`` run inside a managed transactional context: the
outermost decorated call opens, commits (or rolls back) and closes the
session; nested decorated calls join it.

Every insert issued through ``SqlRecordStore`` is its own outermost call, so
the steps of a chat orchestration commit one by one and are never rolled back
together.
"""

from functools import wraps
from sqlalchemy.orm import sessionmaker
import contextvars
from saver_backend.database.config.connection_engine import connection_engine

db_session_context = contextvars.ContextVar("db_session_context", default=None)
"""Context variable storing the active SQLAlchemy session."""

SessionFactory = sessionmaker(bind=connection_engine, expire_on_commit=False)
"""Session factory bound to the application engine."""


def transactional(func):
    """
    Decorator to wrap functions in a managed SQLAlchemy transaction.

    Ensures that:
    - If a session already exists in context, it is reused.
    - Otherwise, a new session is created, committed, and closed.
    - On errors, the session is rolled back and closed.

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
    ... def count_cases(user_id, session=None):
    ...     return session.query(ChatSession).filter(ChatSession.user_id == user_id).count()
    ...
    >>> count_cases(user.id)
    """
    @wraps(func)
    def wrap_func(*args, **kwargs):
        session = db_session_context.get()
        if session:
            return func(*args, session=session, **kwargs)

        session = SessionFactory()
        token = db_session_context.set(session)

        try:
            result = func(*args, session=session, **kwargs)
            session.flush()
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()
            db_session_context.reset(token)

        return result

    return wrap_func
