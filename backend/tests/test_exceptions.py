import pytest

from coursegrid.core.exceptions import (
    AppError,
    InputUnavailableError,
    PersistenceFailureError,
    SchedulerError,
    TermLockedError,
)
from coursegrid.models.course import Semester
from coursegrid.services.term_lock import TermLockRegistry


def test_scheduler_error_structure():
    err = SchedulerError(message="Test error", details={"foo": "bar"})
    assert err.status_code == 400
    assert err.message == "Test error"
    assert err.details == {"foo": "bar"}
    assert isinstance(err, AppError)


def test_app_error_defaults():
    err = AppError("Generic error")
    assert err.status_code == 500
    assert err.details == {}


def test_generation_failures_map_to_server_errors():
    assert InputUnavailableError("down").status_code == 503
    assert PersistenceFailureError("lost").status_code == 500
    locked = TermLockedError("fall", 2026)
    assert locked.status_code == 409
    assert "fall 2026" in locked.message


def test_term_lock_is_released_after_use():
    registry = TermLockRegistry()

    with registry.hold(Semester.fall, 2026):
        assert registry.is_locked(Semester.fall, 2026)
        assert not registry.is_locked(Semester.spring, 2026)

    assert not registry.is_locked(Semester.fall, 2026)


def test_term_lock_refuses_second_holder():
    registry = TermLockRegistry()

    with registry.hold(Semester.fall, 2026):
        try:
            with registry.hold(Semester.fall, 2026):
                raise AssertionError("second holder should have been refused")
        except TermLockedError as exc:
            assert exc.details == {"semester": "fall", "year": 2026}


def test_clearing_term_locks_keeps_held_ones():
    registry = TermLockRegistry()
    with registry.hold(Semester.spring, 2026):
        pass

    with registry.hold(Semester.fall, 2026):
        registry.clear()

        assert registry.is_locked(Semester.fall, 2026)
        with pytest.raises(TermLockedError):
            with registry.hold(Semester.fall, 2026):
                pass

    assert not registry.is_locked(Semester.fall, 2026)
    with registry.hold(Semester.fall, 2026):
        assert registry.is_locked(Semester.fall, 2026)
