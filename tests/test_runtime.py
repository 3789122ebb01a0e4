from datetime import datetime, timedelta

import pytest

from localized_date.adapters.runtime import LocalizedDate, localized_date, localized_dates
from localized_date.core.config import GeneratorConfig
from localized_date.core.errors import InvalidDeclaration, InvalidPropertyName, MissingBaseName

OFFSET = timedelta(hours=5)


class Host:
    """Fake model with counting converters for a UTC-5 user."""

    def __init__(self):
        self.hasDueTime = False
        self.local_calls = []
        self.gmt_calls = []
        self.writes = 0

    def local_date(self, value, with_time, is_due_date):
        self.local_calls.append((value, with_time, is_due_date))
        if value is None:
            return None
        local = value - OFFSET
        if not with_time:
            local = local.replace(hour=0, minute=0, second=0, microsecond=0)
        return local

    def gmt_date(self, value, with_time, is_due_date):
        self.gmt_calls.append((value, with_time, is_due_date))
        if value is None:
            return None
        return value + OFFSET


def test_markers_are_replaced_by_members():
    @localized_dates
    class Task(Host):
        dueLocal = LocalizedDate()

    assert "dueLocal" not in vars(Task)
    assert isinstance(vars(Task)["dueLocalDate"], property)
    assert Task.dueGMTDate is None
    assert Task._dueLocalDate is None


def test_static_policy_memoizes():
    @localized_dates
    class Task(Host):
        dueLocal = LocalizedDate()

    task = Task()
    assert task.dueLocalDate is None
    assert task.local_calls == []

    task.dueGMTDate = datetime(2024, 3, 1, 12, 30)
    first = task.dueLocalDate
    second = task.dueLocalDate

    assert first == datetime(2024, 3, 1)
    assert second is first
    assert len(task.local_calls) == 1


def test_set_then_get_round_trips_through_converters():
    @localized_dates
    class Task(Host):
        dueLocal = LocalizedDate(isDueDate=False)

    task = Task()
    value = datetime(2024, 3, 1, 9, 15)
    task.dueLocalDate = value

    assert task.dueGMTDate == value + OFFSET
    assert task.dueLocalDate == task.local_date(
        task.gmt_date(value, False, False), False, False
    )
    assert task.gmt_calls[0] == (value, False, False)

    task.dueLocalDate = None
    assert task.dueGMTDate is None
    assert task.dueLocalDate is None


def test_dynamic_policy_tracks_flag():
    @localized_dates
    class Task(Host):
        dueLocal = LocalizedDate(withTimeProperty="hasDueTime")

    task = Task()
    task.dueGMTDate = datetime(2024, 3, 1, 12, 30)

    assert task.dueLocalDate == datetime(2024, 3, 1)
    task.hasDueTime = True
    assert task.dueLocalDate == datetime(2024, 3, 1, 7, 30)
    assert len(task.local_calls) == 2

    task.dueGMTDate = None
    assert task.dueLocalDate is None


def test_legacy_value_migrates_once():
    @localized_dates
    class Task(Host):
        dueLocal = LocalizedDate(legacyPropertyName="oldDue")

    task = Task()
    task.oldDue = datetime(2024, 3, 1, 12, 0)

    assert task.dueLocalDate == datetime(2024, 3, 1)
    assert task.oldDue is None
    assert task.dueGMTDate == datetime(2024, 3, 1, 17, 0)

    task.dueLocalDate
    assert len(task.gmt_calls) == 1


def test_legacy_value_ignored_once_gmt_is_set():
    @localized_dates
    class Task(Host):
        dueLocal = LocalizedDate(legacyPropertyName="oldDue")

    task = Task()
    task.dueGMTDate = datetime(2024, 3, 2, 12, 0)
    task.oldDue = datetime(2020, 1, 1)

    assert task.dueLocalDate == datetime(2024, 3, 2)
    assert task.oldDue == datetime(2020, 1, 1)


def test_side_effect_text_runs_on_every_write():
    @localized_dates
    class Task(Host):
        dueLocal = LocalizedDate(setterSideEffects="self.writes += 1")

    task = Task()
    task.dueLocalDate = datetime(2024, 3, 1)
    task.dueLocalDate = None
    assert task.writes == 2


def test_callable_side_effect_sees_updated_state():
    seen = []

    @localized_dates
    class Task(Host):
        dueLocal = LocalizedDate(setterSideEffects=lambda obj: seen.append(obj.dueGMTDate))

    task = Task()
    task.dueLocalDate = datetime(2024, 3, 1)
    assert seen == [datetime(2024, 3, 1, 5, 0)]


def test_side_effect_errors_propagate():
    def fail(obj):
        raise RuntimeError("sync failed")

    @localized_dates
    class Task(Host):
        dueLocal = LocalizedDate(setterSideEffects=fail)

    task = Task()
    with pytest.raises(RuntimeError, match="sync failed"):
        task.dueLocalDate = datetime(2024, 3, 1)
    assert task.dueGMTDate == datetime(2024, 3, 1, 5, 0)


def test_declaration_level_decorator():
    @localized_date("recurringEnd", includeLegacyComputedProperty=True)
    class Task(Host):
        pass

    task = Task()
    task.recurringEndDate = datetime(2024, 3, 1, 9)

    assert task.recurringEndGMTDate == datetime(2024, 3, 1, 14)
    assert task.recurringEndLocalDate == datetime(2024, 3, 1)
    assert task.recurringEndDate == task.recurringEndLocalDate


def test_declaration_level_requires_base_name():
    with pytest.raises(MissingBaseName):

        @localized_date(isDueDate=False)
        class Task(Host):
            pass


def test_marker_bound_to_two_names_is_rejected():
    with pytest.raises(InvalidDeclaration, match="single binding"):

        @localized_dates
        class Task(Host):
            a = b = LocalizedDate()


def test_existing_member_is_not_overwritten():
    with pytest.raises(InvalidDeclaration, match="dueGMTDate"):

        @localized_dates
        class Task(Host):
            dueGMTDate = None
            dueLocal = LocalizedDate()


def test_custom_converter_names():
    config = GeneratorConfig(local_date_function="to_local", gmt_date_function="to_gmt")

    @localized_dates(config=config)
    class Task:
        dueLocal = LocalizedDate()

        def to_local(self, value, with_time, is_due_date):
            return ("local", value)

        def to_gmt(self, value, with_time, is_due_date):
            return ("gmt", value)

    task = Task()
    task.dueLocalDate = 1
    assert task.dueLocalDate == ("local", ("gmt", 1))


def test_existing_hook_attribute_is_not_overwritten():
    class Task(Host):
        _did_set_dueLocal = None
        dueLocal = LocalizedDate(setterSideEffects=lambda task: None)

    with pytest.raises(InvalidDeclaration, match="_did_set_dueLocal"):
        localized_dates(Task)
    assert Task._did_set_dueLocal is None


def test_failed_expansion_installs_no_hook():
    class Task(Host):
        dueLocal = LocalizedDate(
            legacyPropertyName="class", setterSideEffects=lambda task: None
        )

    with pytest.raises(InvalidPropertyName):
        localized_dates(Task)
    assert "_did_set_dueLocal" not in vars(Task)
    assert "dueGMTDate" not in vars(Task)
