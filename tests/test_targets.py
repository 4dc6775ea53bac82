from uph_tracker.services.targets import active_target, resolve_target, sort_targets


def test_resolves_logged_target(make_target):
    a, b = make_target(id="a"), make_target(id="b", is_active=True)
    assert resolve_target("a", [a, b]) is a


def test_deleted_target_falls_back_to_active(make_target):
    a, b = make_target(id="a"), make_target(id="b", is_active=True)
    assert resolve_target("gone", [a, b]) is b
    assert resolve_target(None, [a, b]) is b


def test_no_active_falls_back_to_first(make_target):
    a, b = make_target(id="a"), make_target(id="b")
    assert active_target([a, b]) is a


def test_no_targets_never_invents_one():
    assert resolve_target("x", []) is None


def test_sorted_by_rate(make_target):
    fast = make_target(id="fast", target_uph=15)
    slow = make_target(id="slow", target_uph=8)
    assert [t.id for t in sort_targets([fast, slow])] == ["slow", "fast"]
