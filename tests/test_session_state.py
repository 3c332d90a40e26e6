"""Tests for the web session record and its state machine."""

from __future__ import annotations

import threading

import pytest

from session_state import AtomicFlag, InvalidTransition, LogOnState, LogOnTrigger, SessionState


class TestAtomicFlag:
    def test_compare_and_swap(self):
        flag = AtomicFlag()
        assert flag.compare_and_swap(False, True) is True
        assert flag.is_set()
        assert flag.compare_and_swap(False, True) is False
        assert flag.compare_and_swap(True, False) is True
        assert flag.compare_and_swap(True, False) is False
        assert not flag.is_set()

    def test_only_one_thread_wins(self):
        flag = AtomicFlag()
        winners = []
        barrier = threading.Barrier(8)

        def arm():
            barrier.wait()
            if flag.compare_and_swap(False, True):
                winners.append(threading.get_ident())

        threads = [threading.Thread(target=arm) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(winners) == 1


class TestSessionState:
    def test_starts_empty(self):
        state = SessionState()
        assert state.web_login_key == ""
        assert state.session_id == ""
        assert not state.authenticated
        assert not state.relog_on_pending.is_set()
        assert state.state is LogOnState.IDLE

    def test_credentials_replaced_as_pair(self):
        state = SessionState()
        state.set_credentials("a", "b")
        state.set_credentials("c", "d")
        assert (state.steam_login, state.steam_login_secure) == ("c", "d")
        assert state.authenticated

    def test_stale_secret_recovery_path(self):
        state = SessionState()
        steps = [
            (LogOnTrigger.SECRET_DELIVERED, LogOnState.READY),
            (LogOnTrigger.ATTEMPT_STARTED, LogOnState.ATTEMPTING),
            (LogOnTrigger.SECRET_STALE, LogOnState.STALE_SECRET_PENDING),
            (LogOnTrigger.SECRET_DELIVERED, LogOnState.READY),
            (LogOnTrigger.ATTEMPT_STARTED, LogOnState.ATTEMPTING),
            (LogOnTrigger.SUCCEEDED, LogOnState.AUTHENTICATED),
        ]
        for trigger, expected in steps:
            assert state.transition(trigger) is expected

    def test_exhausted_then_retry(self):
        state = SessionState(state=LogOnState.ATTEMPTING)
        assert state.transition(LogOnTrigger.EXHAUSTED) is LogOnState.FAILED
        assert state.transition(LogOnTrigger.ATTEMPT_STARTED) is LogOnState.ATTEMPTING

    def test_attempt_needs_a_key(self):
        state = SessionState()
        with pytest.raises(InvalidTransition):
            state.transition(LogOnTrigger.ATTEMPT_STARTED)
        assert state.state is LogOnState.IDLE

    def test_success_only_while_attempting(self):
        state = SessionState(state=LogOnState.READY)
        with pytest.raises(InvalidTransition):
            state.transition(LogOnTrigger.SUCCEEDED)


class TestCancel:
    def test_cancel_returns_to_ready(self):
        state = SessionState(state=LogOnState.ATTEMPTING)
        assert state.transition(LogOnTrigger.CANCELLED) is LogOnState.READY
        assert state.transition(LogOnTrigger.ATTEMPT_STARTED) is LogOnState.ATTEMPTING

    def test_set_is_idempotent(self):
        flag = AtomicFlag()
        flag.set()
        flag.set()
        assert flag.is_set()
        assert flag.compare_and_swap(True, False) is True
        assert not flag.is_set()
