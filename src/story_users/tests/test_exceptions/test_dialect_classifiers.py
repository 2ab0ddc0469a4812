import re

import pytest
from sqlalchemy import exc as sa_exc

from story_users.domain.errors import ErrorKind
from story_users.exceptions.classifier import DriverErrorClassifier, NOT_FOUND_MESSAGE
from story_users.exceptions.dialects import (
    MYSQL_DATA_LENGTH,
    MYSQL_DUPLICATE,
    DialectErrorClassifier,
    MySQLErrorClassifier,
    SQLiteErrorClassifier,
    classifier_for_dialect,
    driver_message,
    extract_params,
)


class FakeMySQLError(Exception):
    """Shape of pymysql/aiomysql errors: args == (errno, message)."""


def _integrity(orig: BaseException) -> sa_exc.IntegrityError:
    return sa_exc.IntegrityError("INSERT INTO users ...", {}, orig)


@pytest.fixture
def mysql() -> MySQLErrorClassifier:
    return MySQLErrorClassifier()


class TestExtractParams:
    def test_named_groups(self):
        params = extract_params(
            MYSQL_DUPLICATE, "Error 1062: Duplicate entry 'alice@example.com' for key 'idx_email'"
        )
        assert params == {"code": "1062", "value": "alice@example.com", "field": "idx_email"}

    def test_no_match_is_empty(self):
        assert extract_params(MYSQL_DATA_LENGTH, "something else entirely") == {}

    def test_non_participating_group_is_blank(self):
        pattern = re.compile(r"key '(?P<field>\w+)'(?: row (?P<row>\d+))?")
        assert extract_params(pattern, "key 'idx_email'") == {"field": "idx_email", "row": ""}


class TestDriverMessage:
    def test_unwraps_orig_and_renders_errno(self):
        db_err = _integrity(FakeMySQLError(1062, "Duplicate entry 'a' for key 'b'"))
        assert driver_message(db_err) == "Error 1062: Duplicate entry 'a' for key 'b'"

    def test_plain_error_is_str(self):
        assert driver_message(ValueError("plain")) == "plain"


class TestMySQLClassifier:
    def test_none_passes_through(self, mysql):
        assert mysql.classify(None, "dbg") is None

    def test_duplicate_entry_names_key(self, mysql):
        db_err = _integrity(FakeMySQLError(1062, "Duplicate entry 'alice@example.com' for key 'idx_email'"))
        err = mysql.classify(db_err, "userrepo: insert one user fail")

        assert err.kind is ErrorKind.INVALID_PARAM
        assert err.message.endswith("conflict duplicate idx_email")
        assert err.cause is None

    def test_duplicate_entry_from_raw_text(self, mysql):
        err = mysql.classify(
            Exception("Error 1062: Duplicate entry 'alice@example.com' for key 'idx_email'"), "dbg"
        )
        assert err.kind is ErrorKind.INVALID_PARAM
        assert err.message.endswith("conflict duplicate idx_email")

    def test_data_too_long_names_column(self, mysql):
        db_err = sa_exc.DataError("UPDATE users ...", {}, FakeMySQLError(1406, "Data too long for column 'bio' at row 3"))
        err = mysql.classify(db_err, "dbg")

        assert err.kind is ErrorKind.INVALID_PARAM
        assert "bio" in err.message
        assert err.message.endswith("data too long for bio field")

    def test_column_cannot_be_null(self, mysql):
        db_err = _integrity(FakeMySQLError(1048, "Column 'name' cannot be null"))
        err = mysql.classify(db_err, "dbg")

        assert err.kind is ErrorKind.INVALID_PARAM
        assert err.message.endswith("missing required name field")

    def test_missing_parent_row_is_unknown_resource(self, mysql):
        db_err = _integrity(FakeMySQLError(
            1452,
            "Cannot add or update a child row: a foreign key constraint fails (`story`.`followership`, "
            "CONSTRAINT `fk_followership_follower_id_users` FOREIGN KEY (`follower_id`) "
            "REFERENCES `users` (`id`) ON DELETE CASCADE)",
        ))
        err = mysql.classify(db_err, "userrepo: relate users fail")

        assert err.kind is ErrorKind.UNKNOWN_RESOURCE
        assert err.http_status == 404
        assert err.message.endswith("referenced item does not exist")
        assert err.cause is None

    def test_missing_parent_row_without_constraint_detail(self, mysql):
        db_err = _integrity(FakeMySQLError(1452, "Cannot add or update a child row"))
        assert mysql.classify(db_err, "dbg").kind is ErrorKind.UNKNOWN_RESOURCE

    def test_generic_categories_win_over_patterns(self, mysql):
        err = mysql.classify(sa_exc.NoResultFound("No row was found"), "dbg")

        assert err.kind is ErrorKind.UNKNOWN_RESOURCE
        assert err.message.endswith(NOT_FOUND_MESSAGE)
        assert err.cause is None

    def test_unrecognized_error_keeps_cause(self, mysql):
        low = sa_exc.OperationalError("UPDATE users ...", {}, FakeMySQLError(1205, "Lock wait timeout exceeded; try restarting transaction"))
        err = mysql.classify(low, "userrepo: relate users fail")

        assert err.kind is ErrorKind.INTERNAL_ERROR
        assert err.cause.error is low
        assert err.cause.debug == "userrepo: relate users fail"

    def test_composes_generic_classifier(self, mysql):
        assert isinstance(mysql.generic, DriverErrorClassifier)
        assert mysql.dialect == "mysql"


class TestSQLiteClassifier:
    def test_unique_violation(self):
        db_err = _integrity(Exception("UNIQUE constraint failed: users.email"))
        err = SQLiteErrorClassifier().classify(db_err, "dbg")

        assert err.kind is ErrorKind.INVALID_PARAM
        assert err.message.endswith("conflict duplicate email")

    def test_not_null_violation(self):
        db_err = _integrity(Exception("NOT NULL constraint failed: users.name"))
        err = SQLiteErrorClassifier().classify(db_err, "dbg")
        assert err.message.endswith("missing required name field")

    def test_foreign_key_violation(self):
        db_err = _integrity(Exception("FOREIGN KEY constraint failed"))
        err = SQLiteErrorClassifier().classify(db_err, "dbg")

        assert err.kind is ErrorKind.UNKNOWN_RESOURCE
        assert err.message.endswith("referenced item does not exist")

    def test_mysql_patterns_do_not_apply(self):
        db_err = _integrity(FakeMySQLError(1062, "Duplicate entry 'a' for key 'b'"))
        assert SQLiteErrorClassifier().classify(db_err, "dbg").kind is ErrorKind.INTERNAL_ERROR


def test_custom_rules_are_accepted():
    classifier = DialectErrorClassifier("custom", rules=())
    assert classifier.rules == ()
    assert classifier.classify(RuntimeError("x"), "dbg").kind is ErrorKind.INTERNAL_ERROR


@pytest.mark.parametrize(
    "name, expected",
    [
        ("mysql", MySQLErrorClassifier),
        ("MariaDB", MySQLErrorClassifier),
        ("sqlite", SQLiteErrorClassifier),
    ],
)
def test_classifier_for_dialect(name, expected):
    assert type(classifier_for_dialect(name)) is expected


def test_classifier_for_unknown_dialect_is_generic():
    classifier = classifier_for_dialect("postgresql")
    assert type(classifier) is DriverErrorClassifier
    assert classifier.dialect == "postgresql"
