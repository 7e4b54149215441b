import csv
import json
import os

import numpy as np

from noether import Network
from noether.helpers.logger import RunLogger


def small_net():
    net = Network()
    net.input(4, 4, 1)
    net.conv(2, 2)
    net.fully_connected(3)
    return net


def test_forward_and_backward_are_traced(tmp_path):
    logger = RunLogger(root=tmp_path, tag="trace")
    net = small_net()
    net.forward(np.ones((4, 4, 1)), logger=logger, step=0)
    net.backward(np.ones(3), logger=logger, step=0)

    assert len(logger.rows) == 6
    assert [r["phase"] for r in logger.rows] == ["forward"] * 3 + ["backward"] * 3
    assert [r["layer"] for r in logger.rows[3:]] == ["fc", "conv", "input"]

    with open(logger.csv_path, newline="") as f:
        rows = list(csv.DictReader(f))
    assert len(rows) == 6
    assert rows[1]["dims"] == "3x3x2"

    with open(logger.save_json()) as f:
        assert len(json.load(f)) == 6


def test_plots_are_written(tmp_path):
    logger = RunLogger(root=tmp_path, tag="plots")
    net = small_net()
    net.forward(np.arange(16.0).reshape(4, 4, 1), logger=logger)
    net.backward(np.ones(3), logger=logger)

    maps = logger.plot_feature_maps(net[1].get_output(), tag="conv")
    timings = logger.plot_timings(tag="plots")
    assert os.path.exists(maps)
    assert os.path.exists(timings)


def test_plot_timings_without_rows_is_a_no_op(tmp_path):
    logger = RunLogger(root=tmp_path)
    assert logger.plot_timings() is None
