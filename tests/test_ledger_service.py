"""Outcome ledger: conflict-safe pairwise win/loss counters."""

import threading

from sudoku_arena.services.ledger_service import OutcomeLedger


def test_first_result_initializes_record(store):
    ledger = OutcomeLedger(store)
    assert ledger.record_result('alice', 'bob', 'Bob', True) == {'opponentName': 'Bob', 'wins': 1, 'losses': 0}
    assert ledger.record_result('carol', 'bob', 'Bob', False) == {'opponentName': 'Bob', 'wins': 0, 'losses': 1}


def test_increments_and_refreshes_name(store):
    ledger = OutcomeLedger(store)
    ledger.record_result('alice', 'bob', 'Bob', True)
    record = ledger.record_result('alice', 'bob', 'Robert', False)
    assert record == {'opponentName': 'Robert', 'wins': 1, 'losses': 1}


def test_concurrent_win_and_loss_both_land(store):
    ledger = OutcomeLedger(store)
    barrier = threading.Barrier(2)

    def record(did_win):
        barrier.wait()
        ledger.record_result('alice', 'bob', 'Bob', did_win)

    threads = [threading.Thread(target=record, args=(flag,)) for flag in (True, False)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    [record_] = ledger.get_scores('alice')
    assert (record_.wins, record_.losses) == (1, 1)


def test_scores_sorted_by_games_played(store):
    ledger = OutcomeLedger(store)
    ledger.record_result('alice', 'bob', 'Bob', True)
    for did_win in (True, False, False):
        ledger.record_result('alice', 'carol', 'Carol', did_win)
    store.set('battleScores/alice/dave', {'wins': 2})

    scores = ledger.get_scores('alice')

    assert [r.opponent_id for r in scores] == ['carol', 'dave', 'bob']
    assert scores[0].games_played == 3
    assert scores[1].opponent_name == 'Unknown'


def test_no_scores_for_new_player(store):
    assert OutcomeLedger(store).get_scores('nobody') == []
