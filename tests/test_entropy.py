from ballotbox.entropy import FixedEntropy, HostEntropy, mix


def test_mix_is_deterministic_and_input_sensitive():
    assert mix(1, 2, "a") == mix(1, 2, "a")
    assert mix(1, 2, "a") != mix(1, 2, "b")
    assert mix(1, 2, "a") != mix(2, 2, "a")
    assert mix(1, 2, "a") != mix(1, 3, "a")


def test_fixed_entropy_is_predictable():
    # anyone who knows the inputs can compute the draw ahead of time
    source = FixedEntropy(timestamp=10, beacon=20)
    assert source.random_int("owner") == mix(10, 20, "owner")
    assert source.draws == 1


def test_host_entropy_reads_injected_clock_and_beacon():
    source = HostEntropy(clock=lambda: 123.9, beacon=lambda: 7)
    assert source.random_int("owner") == mix(123, 7, "owner")
