from __future__ import annotations

from backup_lifespan.report import Decision, partition, render_table, summary_line


def test_partition_orders_chronologically(backup):
    c = backup("c", 2018, 7, 3)
    a = backup("a", 2018, 7, 1)
    b2 = backup("b2", 2018, 7, 2)
    b1 = backup("b1", 2018, 7, 2)
    decision = partition([c, a, b2, b1], {c, b2})
    assert decision.kept == (b2, c)
    assert decision.expired == (a, b1)


def test_partition_with_empty_keep_set(backup):
    backups = [backup("x", 2018, 7, 2), backup("y", 2018, 7, 1)]
    decision = partition(backups, set())
    assert decision.kept == ()
    assert [b.name for b in decision.expired] == ["y", "x"]


def test_decision_names_and_dict(backup):
    kept = backup("new", 2018, 7, 2, 6, 30)
    gone = backup("old", 2018, 7, 1)
    decision = Decision(kept=(kept,), expired=(gone,))
    assert decision.kept_names == frozenset({"new"})
    assert decision.expired_names == frozenset({"old"})
    assert decision.to_dict() == {
        "kept": [{"name": "new", "timestamp": "2018-07-02T06:30:00+00:00"}],
        "expired": [{"name": "old", "timestamp": "2018-07-01T00:00:00+00:00"}],
    }


def test_summary_line(backup):
    decision = partition([backup("a", 2018, 1, 1), backup("b", 2018, 1, 2), backup("c", 2018, 1, 3)], set())
    assert summary_line(decision) == "3 backups: keep 0, expire 3"


def test_render_table_has_row_per_backup(backup):
    a, b = backup("a", 2018, 1, 1), backup("b", 2018, 1, 2)
    decision = partition([a, b], {b})
    table = render_table(decision, {b: ["1D", "1M"]})
    assert table.row_count == 2
    assert table.title == "2 backups: keep 1, expire 1"
    assert len(table.columns) == 4
