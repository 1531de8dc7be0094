from fakes import FakeClock

from modeldex.controllers.scroll_budget_controller import ScrollBudgetController


def make_budget(**kwargs):
    clock = FakeClock()
    budget = ScrollBudgetController(timer_factory=clock.single_shot, **kwargs)
    windows = []
    budget.window_changed.connect(windows.append)
    return budget, clock, windows


def test_scroll_debounce_clears_after_quiet_period():
    budget, clock, _ = make_budget(debounce_ms=150)

    budget.notify_scroll()
    assert budget.is_scrolling is True

    clock.advance(100)
    budget.notify_scroll()
    clock.advance(100)
    assert budget.is_scrolling is True

    clock.advance(50)
    assert budget.is_scrolling is False


def test_only_first_k_of_visible_window_eligible_while_scrolling():
    budget, _, _ = make_budget(active_limit=8)
    budget.update_visible_range(10, 25)
    budget.notify_scroll()

    eligible = [i for i in range(10, 26) if budget.is_full_detail_eligible(i)]

    assert eligible == list(range(10, 18))
    assert not budget.is_full_detail_eligible(9)
    assert not budget.is_full_detail_eligible(None)


def test_everything_eligible_when_not_scrolling():
    budget, _, _ = make_budget(active_limit=8)
    budget.update_visible_range(10, 25)

    assert all(budget.is_full_detail_eligible(i) for i in range(0, 40))
    assert list(budget.eligible_range()) == list(range(10, 26))


def test_window_shorter_than_budget():
    budget, _, _ = make_budget(active_limit=8)
    budget.update_visible_range(3, 5)
    budget.notify_scroll()

    assert list(budget.eligible_range()) == [3, 4, 5]


def test_window_changes_are_signalled():
    budget, clock, windows = make_budget(debounce_ms=150)

    budget.update_visible_range(0, 7)
    budget.update_visible_range(0, 7)
    budget.notify_scroll()
    budget.notify_scroll()
    clock.advance(150)

    assert [(w.start_index, w.end_index, w.is_scrolling) for w in windows] == [
        (0, 7, False),
        (0, 7, True),
        (0, 7, False),
    ]


def test_stop_cancels_debounce():
    budget, clock, _ = make_budget()
    budget.notify_scroll()

    budget.stop()
    clock.advance(1000)

    assert clock.active_timers() == []
    assert budget.is_scrolling is True
