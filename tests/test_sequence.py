"""Tests for quote numbering: Q-YYYY-NNNN, global counter, never reused."""
import threading
from datetime import datetime

from catering.core.sequence import (next_quote_id, peek_next_quote_id,
                                    format_quote_id, current_counter)
from catering.core.quotes import create_quote, remove_quote


def _seq(quote_id):
    return int(quote_id.rsplit("-", 1)[1])


class TestFormat:

    def test_zero_padded(self):
        assert format_quote_id(7, 2026) == "Q-2026-0007"

    def test_wider_than_four_digits(self):
        assert format_quote_id(12345, 2026) == "Q-2026-12345"


class TestNextQuoteId:

    def test_first_id(self):
        assert next_quote_id(datetime(2026, 5, 1)) == "Q-2026-0001"

    def test_strictly_increasing(self):
        ids = [next_quote_id() for _ in range(25)]
        seqs = [_seq(i) for i in ids]
        assert seqs == sorted(seqs)
        assert len(set(seqs)) == 25

    def test_year_prefix_not_a_reset(self):
        a = next_quote_id(datetime(2026, 12, 31, 23, 59))
        b = next_quote_id(datetime(2027, 1, 1, 0, 1))
        assert a == "Q-2026-0001"
        assert b == "Q-2027-0002"

    def test_never_reused_after_delete(self, sample_draft):
        q1 = create_quote(sample_draft)
        q2 = create_quote(sample_draft)
        remove_quote(q2)
        remove_quote(q1)
        q3 = create_quote(sample_draft)
        assert _seq(q3) == _seq(q2) + 1

    def test_interleaved_with_deletes(self, sample_draft):
        seen = []
        for i in range(6):
            qid = create_quote(sample_draft)
            seen.append(_seq(qid))
            if i % 2:
                remove_quote(qid)
        assert seen == sorted(set(seen))


class TestConcurrency:

    def test_threads_never_share_a_number(self):
        ids, errors = [], []
        lock = threading.Lock()

        def worker():
            try:
                got = [next_quote_id() for _ in range(20)]
            except Exception as e:
                errors.append(e)
                return
            with lock:
                ids.extend(got)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert errors == []
        assert len(ids) == 160
        assert len(set(ids)) == 160
        assert sorted(_seq(i) for i in ids) == list(range(1, 161))


class TestPeek:

    def test_peek_is_idempotent(self):
        assert peek_next_quote_id() == peek_next_quote_id()

    def test_peek_matches_next(self):
        now = datetime(2026, 6, 1)
        assert peek_next_quote_id(now) == next_quote_id(now)

    def test_counter(self):
        next_quote_id()
        next_quote_id()
        assert current_counter() == 2
