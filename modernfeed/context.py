"""Context variables for tracing refresh and import batches."""

from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator
from uuid import uuid4

correlation_id: ContextVar[str] = ContextVar('correlation_id', default='')


def get_correlation_id() -> str:
    return correlation_id.get('')


@contextmanager
def correlation_scope(cid: str = '') -> Iterator[str]:
    """Tag every log line emitted inside the block with one batch id."""
    if not cid:
        cid = uuid4().hex[:12]
    token = correlation_id.set(cid)
    try:
        yield cid
    finally:
        correlation_id.reset(token)
