import pytest

from minimint.batch import Accumulator, BatchItem, BatchItemKind, Element


def test_transaction_without_commit_is_discarded():
    acc = Accumulator()
    with acc.transaction() as tx:
        tx.append(1)
    assert list(acc) == []


def test_transaction_commit_keeps_items():
    acc = Accumulator()
    with acc.transaction() as tx:
        tx.append(1)
        tx.append(2)
        tx.append(3)
        tx.commit()
    assert list(acc) == [1, 2, 3]


def test_second_uncommitted_transaction_only_drops_its_items():
    acc = Accumulator()
    with acc.transaction() as tx:
        tx.append(1)
        tx.commit()
    with acc.transaction() as tx:
        tx.append(2)
        tx.append(3)
    assert list(acc) == [1]


def test_exception_rolls_back_and_propagates():
    acc = Accumulator([0])
    with pytest.raises(ValueError):
        with acc.transaction() as tx:
            tx.append(1)
            raise ValueError("boom")
    assert list(acc) == [0]


def test_explicit_rollback():
    acc = Accumulator()
    tx = acc.transaction()
    tx.append(1)
    assert list(acc) == [1]
    tx.rollback()
    assert list(acc) == []


def test_finished_transaction_rejects_appends():
    acc = Accumulator()
    tx = acc.transaction()
    tx.commit()
    with pytest.raises(RuntimeError):
        tx.append(1)
    with pytest.raises(RuntimeError):
        tx.rollback()


def test_subtransaction_rollback_keeps_parent_items():
    acc = Accumulator()
    with acc.transaction() as tx:
        tx.append(1)
        with tx.subtransaction() as sub:
            sub.append(2)
        tx.append(3)
        tx.commit()
    assert list(acc) == [1, 3]


def test_committed_subtransaction_dropped_with_parent():
    acc = Accumulator()
    with acc.transaction() as tx:
        tx.append(1)
        with tx.subtransaction() as sub:
            sub.append(2)
            sub.commit()
        assert list(acc) == [1, 2]
    assert list(acc) == []


def test_autocommit():
    acc = Accumulator()
    acc.autocommit(lambda tx: tx.extend([4, 5]))
    assert list(acc) == [4, 5]


def test_autocommit_rolls_back_on_error():
    acc = Accumulator()

    def failing(tx):
        tx.append(1)
        raise KeyError("fail")

    with pytest.raises(KeyError):
        acc.autocommit(failing)
    assert len(acc) == 0


def test_append_from_accumulators():
    acc = Accumulator()
    parts = [Accumulator([1, 2]), Accumulator([]), Accumulator([3])]
    acc.autocommit(lambda tx: tx.append_from_accumulators(parts))
    assert list(acc) == [1, 2, 3]


def test_batch_item_helpers():
    acc = Accumulator()
    with acc.transaction() as tx:
        tx.append_insert_new("a", 1)
        tx.append_insert("b", 2)
        tx.append_delete("c")
        tx.append_maybe_delete("d")
        tx.commit()
    items = list(acc)
    assert [item.kind for item in items] == [
        BatchItemKind.INSERT_NEW,
        BatchItemKind.INSERT,
        BatchItemKind.DELETE,
        BatchItemKind.MAYBE_DELETE,
    ]
    assert items[0] == BatchItem.insert_new("a", 1)
    assert items[1].element == Element("b", 2)
    assert items[2].element is None
    assert items[3].key == "d"


def test_copy_is_independent():
    acc = Accumulator([1])
    copied = acc.copy()
    acc.autocommit(lambda tx: tx.append(2))
    assert list(copied) == [1]
    assert list(acc) == [1, 2]