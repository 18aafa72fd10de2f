from fiscal_checker.domain.services import KeySetReconciler


def make_key(n: int) -> str:
    key = f"3524011234567800019955001{n:09d}{n:010d}"
    assert len(key) == 44
    return key


def test_keys_present_in_both_sources_are_not_reported():
    reconciler = KeySetReconciler()
    result = reconciler.reconcile([make_key(1)], [make_key(1)])

    assert result.only_in_tabular == ()
    assert result.only_in_ledger == ()
    assert result.found_in_both == (make_key(1),)
    assert not result.has_issues()


def test_differences_in_both_directions():
    reconciler = KeySetReconciler()
    result = reconciler.reconcile([make_key(1), make_key(2)], [make_key(2), make_key(3)])

    assert result.only_in_tabular == (make_key(1),)
    assert result.only_in_ledger == (make_key(3),)
    assert not set(result.only_in_tabular) & set(result.only_in_ledger)


def test_prefixed_and_plain_key_count_as_tabular_duplicate():
    key = "35240112345678000199550010000000011234567890"
    reconciler = KeySetReconciler()
    result = reconciler.reconcile([f"NFe{key}", key], [])

    assert result.only_in_tabular == (key,)
    assert result.duplicates_in_tabular == (key,)
    assert result.tabular_keys == (key,)


def test_duplicates_are_independent_of_cross_check():
    reconciler = KeySetReconciler()
    result = reconciler.reconcile([make_key(1), make_key(1)], [make_key(2), make_key(2), make_key(2)])

    assert result.duplicates_in_tabular == (make_key(1),)
    assert result.duplicates_in_ledger == (make_key(2),)
    assert result.only_in_tabular == (make_key(1),)


def test_empty_ledger_reports_every_tabular_key():
    reconciler = KeySetReconciler()
    keys = [make_key(n) for n in range(1, 5)]
    result = reconciler.reconcile(keys, [])

    assert result.only_in_tabular == tuple(keys)
    assert result.found_in_both == ()
    assert result.ledger_keys == ()


def test_swapping_sources_mirrors_the_differences():
    reconciler = KeySetReconciler()
    a = [make_key(1), make_key(2), make_key(4)]
    b = [make_key(2), make_key(3), make_key(5)]

    forward = reconciler.reconcile(a, b)
    backward = reconciler.reconcile(b, a)

    assert forward.only_in_ledger == backward.only_in_tabular
    assert forward.only_in_tabular == backward.only_in_ledger


def test_malformed_and_blank_keys():
    reconciler = KeySetReconciler()
    result = reconciler.reconcile(["123", "", None, "  "], ["123"])

    assert result.only_in_tabular == ()
    assert result.found_in_both == ("123",)
    assert result.tabular_keys == ("123",)
