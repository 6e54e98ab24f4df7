from datetime import date, datetime

from clinic_booking.modules.appointments.slots import SlotWindow, free_slots

DAY = date(2030, 1, 1)


def test_window_has_sixteen_half_hour_slots():
    slots = list(SlotWindow(day=DAY))
    assert len(slots) == 16
    assert slots[0] == datetime(2030, 1, 1, 9, 0)
    assert slots[-1] == datetime(2030, 1, 1, 16, 30)
    assert slots == sorted(slots)


def test_window_excludes_closing_time():
    assert datetime(2030, 1, 1, 17, 0) not in list(SlotWindow(day=DAY))


def test_window_can_be_iterated_again():
    window = SlotWindow(day=DAY)
    assert list(window) == list(window)


def test_free_slots_drops_taken_hhmm():
    taken = [datetime(2030, 1, 1, 10, 0), datetime(2030, 1, 1, 13, 30)]
    free = free_slots(SlotWindow(day=DAY), taken)
    assert len(free) == 14
    assert datetime(2030, 1, 1, 10, 0) not in free
    assert datetime(2030, 1, 1, 13, 30) not in free


def test_free_slots_compares_hour_and_minute_only():
    # a booking at 10:00:45 still blocks the 10:00 slot; 10:15 blocks nothing
    taken = [datetime(2030, 1, 1, 10, 0, 45), datetime(2030, 1, 1, 10, 15)]
    free = free_slots(SlotWindow(day=DAY), taken)
    assert len(free) == 15
    assert datetime(2030, 1, 1, 10, 0) not in free
