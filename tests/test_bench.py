from kuibe import bench


def test_bench_reports_every_phase():
    avgs = bench.run("SS512", rounds=1)
    assert set(avgs) == set(bench.PHASES)
    assert all(v >= 0 for v in avgs.values())
