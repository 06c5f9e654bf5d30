import pytest

from krmkit.errors import (
    ApiError,
    BadRequestError,
    NotFoundError,
    ResourceError,
    cause,
    ignore,
    ignore_any,
    ignore_not_found,
    is_api_error,
    is_api_error_wrapped,
    is_not_found,
    wrap,
)

BOOM = ValueError("boom")


@pytest.mark.parametrize("matches, expected", [(True, None), (False, BOOM)])
def test_ignore(matches, expected):
    assert ignore(lambda err: matches, BOOM) is expected


@pytest.mark.parametrize(
    "predicates, expected",
    [
        ([lambda err: True], None),
        ([lambda err: True, lambda err: False], None),
        ([lambda err: False], BOOM),
    ],
)
def test_ignore_any(predicates, expected):
    assert ignore_any(BOOM, *predicates) is expected


def test_ignore_not_found_keeps_other_errors():
    assert ignore_not_found(BOOM) is BOOM


def test_ignore_not_found_drops_not_found():
    assert ignore_not_found(NotFoundError("pods", "p")) is None
    assert ignore_not_found(wrap(NotFoundError(), "cannot get object")) is None


def test_ignore_not_found_none():
    assert ignore_not_found(None) is None


@pytest.mark.parametrize(
    "error, expected",
    [(BadRequestError("BadRequest Reason"), True), (BOOM, False)],
)
def test_is_api_error_wrapped(error, expected):
    assert is_api_error_wrapped(error) is expected


def test_is_api_error_wrapped_through_wrap():
    assert is_api_error_wrapped(wrap(BadRequestError("x"), "outer")) is True
    assert is_api_error(wrap(BadRequestError("x"), "outer")) is False


def test_wrap_message_and_cause():
    wrapped = wrap(BOOM, "cannot get object")
    assert isinstance(wrapped, ResourceError)
    assert str(wrapped) == "cannot get object: boom"
    assert cause(wrapped) is BOOM
    assert cause(wrap(wrapped, "outer")) is BOOM


def test_wrap_none():
    assert wrap(None, "cannot get object") is None


def test_api_error_codes():
    assert NotFoundError("pods", "p").code == 404
    assert str(NotFoundError("pods", "p")) == 'pods "p" not found'
    bad = BadRequestError("BadRequest Reason")
    assert (bad.code, bad.reason) == (400, "BadRequest")
    assert isinstance(bad, ApiError)


def test_is_not_found():
    assert is_not_found(NotFoundError()) is True
    assert is_not_found(BOOM) is False
    assert is_not_found(None) is False