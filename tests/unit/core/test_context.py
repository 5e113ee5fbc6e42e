"""Correlation context: adopt caller id unchanged, generate otherwise, fail closed."""

import contextvars
import uuid
from unittest.mock import patch

import pytest

from user_audit.core.context import (
    CorrelationIdUnavailableError,
    bind_correlation_id,
    get_correlation_id,
    new_correlation_id,
)


def _in_fresh_context(fn, *args):
    return contextvars.Context().run(fn, *args)


def test_supplied_id_adopted_unchanged():
    def run():
        cid = bind_correlation_id("Caller-ID-123")
        return cid, get_correlation_id()

    assert _in_fresh_context(run) == ("Caller-ID-123", "Caller-ID-123")


@pytest.mark.parametrize("supplied", [None, "", "   "])
def test_missing_id_is_generated(supplied):
    def run():
        return bind_correlation_id(supplied), get_correlation_id()

    cid, current = _in_fresh_context(run)
    assert cid == current
    uuid.UUID(cid)


def test_generated_ids_are_unique():
    assert len({new_correlation_id() for _ in range(100)}) == 100


def test_no_id_outside_a_request():
    assert _in_fresh_context(get_correlation_id) is None


def test_entropy_failure_fails_closed():
    with patch("user_audit.core.context.uuid.uuid4", side_effect=OSError("no entropy")):
        with pytest.raises(CorrelationIdUnavailableError):
            _in_fresh_context(bind_correlation_id, None)
