import traceback
from http import HTTPStatus

import pytest

from story_users.domain.errors import (
    AUTHENTICATION_FAIL_CODE,
    INVALID_PARAM_CODE,
    AnnotatedError,
    DomainError,
    ErrorKind,
)


class TestCatalog:
    """The five kinds and their fixed (status, code, message) triples."""

    @pytest.mark.parametrize(
        "kind, status, code",
        [
            (ErrorKind.AUTHENTICATION_FAIL, HTTPStatus.UNAUTHORIZED, 0x0041),
            (ErrorKind.UNKNOWN_RESOURCE, HTTPStatus.NOT_FOUND, 0x0044),
            (ErrorKind.INVALID_PARAM, HTTPStatus.BAD_REQUEST, 0x0041),
            (ErrorKind.OPERATION_UNSUPPORTED, HTTPStatus.FORBIDDEN, 0x0043),
            (ErrorKind.INTERNAL_ERROR, HTTPStatus.INTERNAL_SERVER_ERROR, 0x0050),
        ],
    )
    def test_kind_status_and_code(self, kind, status, code):
        err = kind.error()
        assert err.http_status == status
        assert err.code == code
        assert err.message == kind.message
        assert err.cause is None

    def test_invalid_param_shares_authentication_code(self):
        # kept on purpose: clients already match on it
        assert INVALID_PARAM_CODE == AUTHENTICATION_FAIL_CODE

    def test_error_is_raisable(self):
        with pytest.raises(DomainError) as exc_info:
            raise ErrorKind.UNKNOWN_RESOURCE.error()
        assert exc_info.value.kind is ErrorKind.UNKNOWN_RESOURCE


class TestWrap:
    @pytest.mark.parametrize("kind", list(ErrorKind))
    def test_wrap_none_is_none(self, kind):
        assert kind.wrap(None, "anything") is None
        assert kind.wrapf(None, "anything %s", 1) is None
        assert kind.error().wrap(None, "anything") is None
        assert kind.error().wrapf(None, "anything %d", 2) is None

    def test_wrap_keeps_kind_and_message(self):
        low = ValueError("boom")
        err = ErrorKind.INTERNAL_ERROR.wrap(low, "userrepo: insert one user fail")

        assert err.kind is ErrorKind.INTERNAL_ERROR
        assert err.message == "Internal Server Error"
        assert isinstance(err.cause, AnnotatedError)
        assert err.cause.error is low
        assert err.cause.debug == "userrepo: insert one user fail"
        assert err.__cause__ is err.cause
        assert err.cause.__cause__ is low

    def test_wrapf_formats_debug(self):
        err = ErrorKind.INTERNAL_ERROR.wrapf(KeyError("k"), "lookup %s failed after %d tries", "users", 3)
        assert err.cause.debug == "lookup users failed after 3 tries"

    def test_wrap_captures_call_site(self):
        err = ErrorKind.INTERNAL_ERROR.wrap(RuntimeError("x"), "dbg")
        assert isinstance(err.cause.stack, traceback.StackSummary)
        assert err.cause.stack[-1].name == "test_wrap_captures_call_site"
        assert "test_wrap_captures_call_site" in err.cause.format_stack()

    def test_instance_wrap_does_not_mutate_original(self):
        base = ErrorKind.INVALID_PARAM.with_message("bad email")
        wrapped = base.wrap(ValueError("x"), "dbg")

        assert wrapped is not base
        assert base.cause is None
        assert wrapped.message == base.message


class TestWithMessage:
    def test_with_message_appends(self):
        err = ErrorKind.UNKNOWN_RESOURCE.with_message("item not found with specified identifier/field")
        assert err.message == "Requested resource not available: item not found with specified identifier/field"

    def test_with_messagef(self):
        err = ErrorKind.INVALID_PARAM.with_messagef("conflict duplicate %s", "idx_email")
        assert err.message == "Invalid or malformed parameters: conflict duplicate idx_email"

    def test_with_message_keeps_cause(self):
        low = ValueError("x")
        err = ErrorKind.INTERNAL_ERROR.wrap(low, "dbg").with_message("while saving")
        assert err.cause.error is low
        assert err.message == "Internal Server Error: while saving"

    def test_prototypes_stay_untouched(self):
        ErrorKind.INVALID_PARAM.with_message("one").with_message("two")
        assert ErrorKind.INVALID_PARAM.message == "Invalid or malformed parameters"
        assert ErrorKind.INVALID_PARAM.error().message == "Invalid or malformed parameters"


class TestProjections:
    def test_payload_never_contains_cause(self):
        err = ErrorKind.INTERNAL_ERROR.wrap(RuntimeError("password=hunter2"), "dbg")
        payload = err.to_payload()

        assert payload == {"errorMsg": "Internal Server Error", "code": 0x0050}
        assert "hunter2" not in str(payload)

    def test_str_includes_cause_for_diagnostics(self):
        err = ErrorKind.INTERNAL_ERROR.wrap(RuntimeError("boom"), "dbg")
        assert str(err) == "Internal Server Error: dbg: boom"
        assert str(ErrorKind.UNKNOWN_RESOURCE.error()) == "Requested resource not available"

    def test_repr_names_kind(self):
        assert "UNKNOWN_RESOURCE" in repr(ErrorKind.UNKNOWN_RESOURCE.error())
