"""Tests for attribute resolution."""

from collections import namedtuple
from dataclasses import dataclass
from enum import Enum

from otel_decorator.core.attributes import coerce_value, merge, namespaced, resolve


@dataclass
class User:
    id: int
    name: str


Point = namedtuple("Point", ["x", "y"])


class Login:
    __slots__ = ("name", "token")

    def __init__(self, name, token):
        self.name = name
        self.token = token


class Account:
    def __init__(self, first, last):
        self._first = first
        self._last = last

    @property
    def name(self):
        return f"{self._first} {self._last}"

    def describe(self):
        return self.name


class Color(Enum):
    RED = "red"
    BLUE = object()


def test_bare_names_are_looked_up_directly():
    assert resolve({"id": 1, "other": 2}, ["id"]) == {"app.id": 1}


def test_missing_bindings_are_omitted():
    assert resolve({"id": 1}, ["id", "user", ["user", "name"]]) == {"app.id": 1}


def test_nested_paths_join_segments_with_underscores():
    environment = {"user": {"profile": {"name": "ada"}}}

    assert resolve(environment, [["user", "profile", "name"]]) == {"app.user_profile_name": "ada"}


def test_nested_paths_with_missing_keys_are_omitted():
    environment = {"user": {"id": 1}, "count": 3}

    assert resolve(environment, [["user", "name"], ["count", "real"]]) == {}


def test_nested_paths_into_records():
    environment = {"user": User(1, "ada"), "point": Point(3, 4), "plain": 5}

    attributes = resolve(environment, [["user", "name"], ["point", "y"], ["user", "email"]])

    assert attributes == {"app.user_name": "ada", "app.point_y": 4}


def test_nested_paths_into_slots_and_properties():
    environment = {"login": Login("ada", "t0k"), "account": Account("Ada", "Lovelace")}

    attributes = resolve(environment, [["login", "name"], ["account", "name"], ["account", "describe"]])

    assert attributes == {"app.login_name": "ada", "app.account_name": "Ada Lovelace"}


def test_does_not_follow_methods_on_builtins():
    assert resolve({"name": "ada"}, [["name", "upper"]]) == {}
    assert resolve({"count": 3}, [["count", "real"]]) == {}


def test_result_is_only_present_when_bound():
    assert resolve({"id": 1}, ["result"]) == {}
    assert resolve({"id": 1, "result": "ok"}, ["result"]) == {"app.result": "ok"}


def test_environment_is_not_modified():
    environment = {"user": {"name": "ada"}}

    resolve(environment, ["user", ["user", "name"]])

    assert environment == {"user": {"name": "ada"}}


def test_explicit_prefix():
    assert resolve({"id": 1}, ["id"], prefix="billing") == {"billing.id": 1}
    assert resolve({"id": 1}, ["id"], prefix="") == {"id": 1}


def test_sensitive_attributes_are_redacted():
    environment = {"password": "hunter2", "creds": {"token": "abc", "user": "ada"}}

    attributes = resolve(environment, ["password", "creds"])

    assert attributes == {
        "app.password": "***REDACTED***",
        "app.creds_token": "***REDACTED***",
        "app.creds_user": "ada",
    }


def test_coerce_value():
    assert coerce_value("text") == "text"
    assert coerce_value(True) is True
    assert coerce_value(3) == 3
    assert coerce_value(2.5) == 2.5
    assert coerce_value(Color.RED) == "red"
    assert coerce_value(Color.BLUE) == "BLUE"
    assert coerce_value([1, 2]) == (1, 2)
    assert coerce_value(("ok", 1)) == "('ok', 1)"
    assert coerce_value(None) == "None"
    assert coerce_value([]) == "[]"


def test_merge_prefers_exit_values():
    entry = {"app.id": 1, "app.count": 1}
    exit = {"app.count": 2, "app.result": "ok"}

    assert merge(entry, exit) == {"app.id": 1, "app.count": 2, "app.result": "ok"}


def test_namespaced():
    assert namespaced("exit") == "app.exit"
    assert namespaced("exit", "svc") == "svc.exit"
