import random

import pytest

from db_engine import Engine
from kv_store import ABSENT, Present


@pytest.fixture
def engine():
    """Fresh engine for each test"""
    return Engine()


# ======================
# Data Commands
# ======================

def test_get_unset_key_is_none(engine):
    assert engine.get("a") is None


def test_count_tracking(engine):
    engine.set("a", "10")
    engine.set("b", "10")
    assert engine.count_equal_to("10") == 2
    engine.unset("a")
    assert engine.count_equal_to("10") == 1
    engine.unset("b")
    assert engine.count_equal_to("10") == 0


def test_count_of_unknown_value(engine):
    assert engine.count_equal_to("nothing") == 0


def test_unset_absent_key_is_noop(engine):
    engine.set("b", "1")
    engine.begin()
    engine.unset("a")
    assert engine.get("a") is None
    assert engine.count_equal_to("1") == 1
    assert engine.transactions.frames[-1] == {}


# ======================
# Transaction Commands
# ======================

def test_rollback_and_commit_without_transaction(engine):
    assert engine.rollback() is False
    assert engine.commit() is False
    assert engine.depth == 0


def test_first_write_wins(engine):
    engine.begin()
    engine.set("a", "1")
    engine.set("a", "2")
    assert engine.transactions.frames[-1] == {"a": ABSENT}
    assert engine.rollback() is True
    assert engine.get("a") is None
    assert engine.count_equal_to("1") == 0
    assert engine.count_equal_to("2") == 0


def test_set_then_unset_in_block_restores_value(engine):
    engine.set("a", "1")
    engine.begin()
    engine.unset("a")
    engine.set("a", "3")
    engine.unset("a")
    assert engine.transactions.frames[-1] == {"a": Present("1")}
    engine.rollback()
    assert engine.get("a") == "1"
    assert engine.count_equal_to("1") == 1


def test_nested_rollback(engine):
    engine.set("a", "1")
    engine.begin()
    engine.set("a", "2")
    engine.begin()
    engine.set("a", "3")
    assert engine.rollback() is True
    assert engine.get("a") == "2"
    assert engine.rollback() is True
    assert engine.get("a") == "1"
    assert engine.rollback() is False


def test_cascading_commit(engine):
    engine.begin()
    engine.set("a", "1")
    engine.begin()
    engine.set("a", "2")
    assert engine.commit() is True
    assert engine.get("a") == "2"
    assert engine.depth == 0
    assert engine.rollback() is False


def test_rollback_restores_counts(engine):
    engine.set("x", "10")
    engine.set("y", "10")
    engine.begin()
    engine.set("x", "20")
    assert engine.count_equal_to("10") == 1
    engine.rollback()
    assert engine.count_equal_to("10") == 2
    assert engine.count_equal_to("20") == 0


def test_depth_state_machine(engine):
    assert not engine.in_transaction
    engine.begin()
    engine.begin()
    engine.begin()
    assert engine.depth == 3
    engine.set("a", "1")
    engine.get("a")
    assert engine.depth == 3
    engine.rollback()
    assert engine.depth == 2
    engine.commit()
    assert engine.depth == 0


def test_inner_rollback_keeps_outer_changes(engine):
    engine.begin()
    engine.set("a", "1")
    engine.begin()
    engine.set("b", "2")
    engine.rollback()
    assert engine.get("a") == "1"
    assert engine.get("b") is None
    engine.rollback()
    assert engine.get("a") is None


# ======================
# Invariant Tests
# ======================

def test_index_matches_store_under_random_operations(engine):
    rng = random.Random(42)
    keys = ["a", "b", "c", "d"]
    values = ["1", "2", "3"]
    for _ in range(2000):
        op = rng.choice(["set", "set", "unset", "begin", "rollback", "commit"])
        if op == "set":
            engine.set(rng.choice(keys), rng.choice(values))
        elif op == "unset":
            engine.unset(rng.choice(keys))
        else:
            getattr(engine, op)()
        engine.store.check_invariant()
        assert engine.store.index.total() == len(engine.store)


def test_rollback_returns_exact_begin_state(engine):
    rng = random.Random(7)
    for key in "abc":
        engine.set(key, rng.choice("xyz"))
    snapshot = dict(engine.store.items())
    engine.begin()
    for _ in range(200):
        key = rng.choice("abcd")
        if rng.random() < 0.3:
            engine.unset(key)
        else:
            engine.set(key, rng.choice("xyz"))
    engine.rollback()
    assert dict(engine.store.items()) == snapshot
    engine.store.check_invariant()
