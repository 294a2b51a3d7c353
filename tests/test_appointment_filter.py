import pytest

from app.services.v1 import StatusFilter, appointment_filter, filter_appointments, sort_by_time
from fakes import model


@pytest.fixture
def appointments():
    return [
        model(id=1, status="scheduled", patient="Maria Souza", doctor="Dr. Paulo Lima"),
        model(id=2, status="checked_in", patient="João Pereira", doctor="Dr. Ana Costa"),
        model(id=3, status="in_consultation", patient="Carla Dias", doctor="Dr. Paulo Lima"),
        model(id=4, status="completed", patient="Bruno Alves", doctor="Dr. Ana Costa"),
        model(id=5, status="cancelled", patient="maria clara", doctor="Dr. Rui Melo"),
        model(id=6, status="Confirmed", patient="Eva Rocha", doctor="Dr. Rui Melo"),
    ]


def ids(items):
    return [a.id for a in items]


def test_blank_search_and_all_returns_everything(appointments):
    assert ids(filter_appointments(appointments)) == [1, 2, 3, 4, 5, 6]
    assert ids(filter_appointments(appointments, "   ", "all")) == [1, 2, 3, 4, 5, 6]


def test_search_is_case_insensitive_on_patient_and_doctor(appointments):
    assert ids(filter_appointments(appointments, "MARIA")) == [1, 5]
    assert ids(filter_appointments(appointments, "ana costa")) == [2, 4]


def test_exact_status_filter(appointments):
    assert ids(filter_appointments(appointments, filter_status="cancelled")) == [5]
    assert ids(filter_appointments(appointments, filter_status=StatusFilter.COMPLETED)) == [4]


def test_scheduled_filter_includes_confirmed_label(appointments):
    assert ids(filter_appointments(appointments, filter_status="scheduled")) == [1, 6]


def test_pending_groups_patients_on_site(appointments):
    assert ids(filter_appointments(appointments, filter_status="pending")) == [2, 3]


def test_search_and_status_combine(appointments):
    assert ids(filter_appointments(appointments, "paulo", "in_consultation")) == [3]


def test_unknown_filter_is_rejected(appointments):
    with pytest.raises(ValueError):
        filter_appointments(appointments, filter_status="Pendente")


def test_results_are_memoised(appointments):
    hits = appointment_filter._filter_cached.cache_info().hits
    first = filter_appointments(appointments, "maria")
    second = filter_appointments(appointments, "maria")
    assert first == second
    assert first is not second
    assert appointment_filter._filter_cached.cache_info().hits == hits + 1


def test_sort_by_time():
    late = model(id=1, when="2026-10-18T15:00:00+00:00")
    early = model(id=2, when="2026-10-18T09:00:00+00:00")
    assert ids(sort_by_time([late, early])) == [2, 1]
    assert ids(sort_by_time([late, early], newest_first=True)) == [1, 2]
