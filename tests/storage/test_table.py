"""
Table Storage Tests
===================

Tests for Table, its borrow scopes, and the exclusivity contract.

INVARIANTS TESTED:
1. Ids are allocated monotonically and never reused
2. Shared scopes coexist; an exclusive scope excludes everything else
3. Views die with their scope; mapped rows survive it
4. Two live mutable views from one scope never alias
5. Borrow events are audited and logged
"""

import logging
from dataclasses import dataclass

import pytest

from rowtable import (
    AlreadyBorrowed,
    AlreadyMutablyBorrowed,
    AuditEventType,
    BorrowAuditLog,
    BorrowReleased,
    ErrorCode,
    Id,
    MappedRow,
    Table,
    TableConfig,
)


@dataclass
class User:
    name: str
    age: int


def make_users() -> Table:
    table = Table(entity=User, config=TableConfig(name="users"))
    table.insert(User("alice", 30))
    table.insert(User("bob", 25))
    return table


class TestAllocation:
    """Id allocation and structural changes."""

    def test_ids_are_sequential_and_tagged(self):
        table = Table(entity=User)

        first = table.insert(User("alice", 30))
        second = table.insert(User("bob", 25))

        assert first == Id(1)
        assert second == Id(2)
        assert first.entity is User
        assert repr(second) == "Id[User](2)"

    def test_first_id_from_config(self):
        table = Table(config=TableConfig(first_id=100))

        assert table.extend(["a", "b"]) == [Id(100), Id(101)]

    def test_removed_ids_not_reused(self):
        table = Table()
        table.insert("a")
        removed = table.insert("b")

        assert table.remove(removed) == "b"
        assert table.insert("c") == Id(3)
        assert removed not in table

    def test_remove_missing_returns_none(self):
        table = Table()

        assert table.remove(Id(42)) is None

    def test_len_contains_clear(self):
        table = make_users()

        assert len(table) == 2
        assert Id(1) in table

        table.clear()
        assert len(table) == 0
        assert Id(1) not in table


class TestSharedScope:
    """borrow() and Row views."""

    def test_get_returns_row(self):
        table = make_users()

        with table.borrow() as rows:
            row = rows.get(Id(1))

            assert row.name == "alice"
            assert row.id == Id(1)
            assert rows.get(Id(99)) is None
            assert len(rows) == 2
            assert Id(2) in rows
            assert rows.ids() == (Id(1), Id(2))

    def test_stored_none_is_a_row(self):
        table = Table()
        row_id = table.insert(None)

        with table.borrow() as rows:
            row = rows.get(row_id)
            assert row is not None
            assert row.data is None

    def test_shared_scopes_coexist(self):
        table = make_users()

        with table.borrow() as outer:
            with table.borrow() as inner:
                assert outer.get(Id(1)) == inner.get(Id(1))
                assert table.is_borrowed
                assert not table.is_mutably_borrowed

        assert not table.is_borrowed

    def test_row_dies_with_scope(self):
        table = make_users()

        with table.borrow() as rows:
            row = rows.get(Id(1))
            mapped = row.map(lambda user: user.name)

        with pytest.raises(BorrowReleased):
            row.data
        with pytest.raises(BorrowReleased):
            rows.get(Id(1))

        assert isinstance(mapped, MappedRow)
        assert mapped.data == "alice"
        assert mapped.id == Id(1)

    def test_mapped_row_outlives_table(self):
        table = make_users()

        with table.borrow() as rows:
            mapped = rows.get(Id(2)).map(lambda user: user.age)

        del table
        assert mapped.map(lambda age: age + 1).data == 26


class TestExclusiveScope:
    """borrow_mut() and RowMut views."""

    def test_mutation_visible_after_scope(self):
        table = Table()
        row_id = table.insert("a")

        with table.borrow_mut() as rows:
            rows.get_mut(row_id).data = "x"

        with table.borrow() as rows:
            assert rows.get(row_id).data == "x"

    def test_attribute_mutation_visible_after_scope(self):
        table = make_users()

        with table.borrow_mut() as rows:
            row = rows.get_mut(Id(2))
            row.age += 1

        with table.borrow() as rows:
            assert rows.get(Id(2)).age == 26

    def test_get_mut_missing_returns_none(self):
        table = make_users()

        with table.borrow_mut() as rows:
            assert rows.get_mut(Id(99)) is None

    def test_second_mutable_view_supersedes_first(self):
        table = make_users()

        with table.borrow_mut() as rows:
            first = rows.get_mut(Id(1))
            second = rows.get_mut(Id(2))

            with pytest.raises(AlreadyBorrowed):
                first.data
            with pytest.raises(AlreadyBorrowed):
                first.name = "mallory"

            second.name = "robert"

        with table.borrow() as rows:
            assert rows.get(Id(1)).name == "alice"
            assert rows.get(Id(2)).name == "robert"

    def test_same_id_twice_never_aliases(self):
        table = make_users()

        with table.borrow_mut() as rows:
            first = rows.get_mut(Id(1))
            second = rows.get_mut(Id(1))

            with pytest.raises(AlreadyBorrowed):
                first.age = 0
            assert second.age == 30

    def test_insert_and_remove_inside_scope(self):
        table = make_users()

        with table.borrow_mut() as rows:
            row = rows.get_mut(Id(1))
            new_id = rows.insert(User("carol", 41))

            with pytest.raises(AlreadyBorrowed):
                row.data

            assert rows.remove(Id(2)) == User("bob", 25)
            assert len(rows) == 2
            assert new_id in rows

        with table.borrow() as rows:
            assert [r.name for r in rows] == ["alice", "carol"]

    def test_row_mut_dies_with_scope(self):
        table = make_users()

        with table.borrow_mut() as rows:
            row = rows.get_mut(Id(1))

        with pytest.raises(BorrowReleased):
            row.data = User("eve", 1)
        with pytest.raises(BorrowReleased):
            rows.iter_mut()


class TestExclusivity:
    """Conflicting borrows are rejected, never silently permitted."""

    def test_borrow_mut_while_borrowed(self):
        table = make_users()

        with table.borrow():
            with pytest.raises(AlreadyBorrowed):
                with table.borrow_mut():
                    pass

    def test_borrow_mut_twice(self):
        table = make_users()

        with table.borrow_mut():
            with pytest.raises(AlreadyBorrowed):
                with table.borrow_mut():
                    pass

    def test_borrow_while_mutably_borrowed(self):
        table = make_users()

        with table.borrow_mut():
            with pytest.raises(AlreadyMutablyBorrowed):
                with table.borrow():
                    pass

    @pytest.mark.parametrize("action", [
        lambda t: t.insert(User("x", 1)),
        lambda t: t.extend([User("x", 1)]),
        lambda t: t.remove(Id(1)),
        lambda t: t.clear(),
    ])
    def test_structural_changes_while_borrowed(self, action):
        table = make_users()

        with table.borrow():
            with pytest.raises(AlreadyBorrowed):
                action(table)

        with table.borrow_mut():
            with pytest.raises(AlreadyBorrowed):
                action(table)

        assert len(table) == 2

    def test_flag_released_on_error(self):
        table = make_users()

        with pytest.raises(RuntimeError):
            with table.borrow_mut():
                raise RuntimeError("boom")

        assert not table.is_borrowed
        with table.borrow_mut():
            pass

    def test_error_carries_code_and_table(self):
        table = make_users()

        with table.borrow_mut():
            with pytest.raises(AlreadyMutablyBorrowed) as excinfo:
                with table.borrow():
                    pass

        error = excinfo.value.to_error()
        assert excinfo.value.code is ErrorCode.ALREADY_MUTABLY_BORROWED
        assert error.code is ErrorCode.ALREADY_MUTABLY_BORROWED
        assert error.context == (("table", "users"),)


class TestAudit:
    """Borrow audit trail and logging."""

    def test_audit_disabled_by_default(self):
        assert make_users().audit is None

    def test_config_enables_audit(self):
        table = Table(config=TableConfig(name="orders", audit_borrows=True))

        with table.borrow():
            pass

        events = [(e.event_type, e.kind) for e in table.audit.get_entries()]
        assert events == [
            (AuditEventType.ACQUIRED, "shared"),
            (AuditEventType.RELEASED, "shared"),
        ]
        assert all(e.table == "orders" for e in table.audit.get_entries())

    def test_shared_log_records_reborrow_and_rejection(self):
        audit = BorrowAuditLog()
        table = Table(config=TableConfig(name="users"), audit=audit)
        row_id = table.insert("a")

        with table.borrow_mut() as rows:
            rows.get_mut(row_id)
            with pytest.raises(AlreadyMutablyBorrowed):
                with table.borrow():
                    pass

        assert len(audit.get_entries(AuditEventType.REBORROWED)) == 1
        rejected = audit.get_entries(AuditEventType.REJECTED)
        assert len(rejected) == 1
        assert rejected[0].kind == "shared"
        assert [e.sequence for e in audit.get_entries()] == list(range(1, audit.entry_count + 1))

    def test_rejection_logged(self, caplog):
        table = make_users()
        caplog.set_level(logging.WARNING, logger="rowtable.borrow")

        with table.borrow():
            with pytest.raises(AlreadyBorrowed):
                table.insert(User("x", 1))

        assert "borrow rejected" in caplog.text
        assert "users" in caplog.text


class TestConfig:
    """TableConfig validation."""

    def test_defaults(self):
        config = TableConfig()

        assert config.name == "table"
        assert config.first_id == 1
        assert config.audit_borrows is False

    @pytest.mark.parametrize("kwargs", [
        {"name": ""},
        {"first_id": -1},
    ])
    def test_invalid_values_rejected(self, kwargs):
        with pytest.raises(ValueError):
            TableConfig(**kwargs)
