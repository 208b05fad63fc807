"""
Tests for the greedy edge tracer
"""
import pytest
import numpy as np


def edge_map_from(strength):
    from src.vectorization import EdgeMap

    return EdgeMap.from_strength(np.asarray(strength, dtype=np.float64))


def random_edge_map(seed: int, shape=(40, 50)):
    rng = np.random.default_rng(seed)
    strength = rng.integers(0, 256, size=shape).astype(np.float64)
    strength[0, :] = strength[-1, :] = 0
    strength[:, 0] = strength[:, -1] = 0
    return edge_map_from(strength)


class TestEdgeTracer:
    """Test suite for EdgeTracer"""

    def test_single_vertical_line(self):
        from src.vectorization import EdgeTracer

        strength = np.zeros((10, 10))
        strength[1:9, 4] = 200
        traces = EdgeTracer(threshold=15).trace(edge_map_from(strength))

        assert len(traces) == 1
        assert traces[0].points == tuple((4, y) for y in range(1, 9))

    def test_neighbor_priority_prefers_east(self):
        """From a pixel with east and south neighbors the walk goes east"""
        from src.vectorization import EdgeTracer

        strength = np.zeros((6, 6))
        strength[1, 1:4] = 100
        strength[2:5, 1] = 100
        traces = EdgeTracer(threshold=15).trace(edge_map_from(strength))

        assert traces[0].points[:3] == ((1, 1), (2, 1), (3, 1))
        # South branch is picked up by a second scan-order trace
        assert traces[1].start == (1, 2)

    def test_southwest_before_west(self):
        from src.vectorization import EdgeTracer

        strength = np.zeros((6, 6))
        strength[1, 3] = 100
        strength[2, 3] = 100
        strength[3, 2] = 100  # SW of (3, 2)
        strength[2, 2] = 100  # W of (3, 2)
        traces = EdgeTracer(threshold=15).trace(edge_map_from(strength))

        assert len(traces) == 1
        assert traces[0].points == ((3, 1), (3, 2), (2, 3), (2, 2))

    def test_threshold_is_strict(self):
        from src.vectorization import EdgeTracer

        strength = np.zeros((5, 8))
        strength[2, 1:7] = 40
        edge_map = edge_map_from(strength)

        assert EdgeTracer(threshold=40).trace(edge_map) == []
        assert len(EdgeTracer(threshold=39.9).trace(edge_map)) == 1

    def test_short_traces_dropped(self):
        from src.vectorization import EdgeTracer

        strength = np.zeros((8, 8))
        strength[1, 1] = 200          # isolated pixel
        strength[5, 4:6] = 200        # two-pixel segment
        strength[3, 1:4] = 200        # three-pixel segment
        traces = EdgeTracer(threshold=15).trace(edge_map_from(strength))

        assert len(traces) == 1
        assert traces[0].points == ((1, 3), (2, 3), (3, 3))

    def test_trace_length_capped(self):
        from src.vectorization import EdgeTracer

        strength = np.zeros((3, 1202))
        strength[1, 1:1201] = 200
        traces = EdgeTracer(threshold=15).trace(edge_map_from(strength))

        assert [len(t) for t in traces] == [1000, 200]
        assert traces[1].start == (1001, 1)

    def test_deterministic(self):
        from src.vectorization import EdgeTracer

        edge_map = random_edge_map(42)
        first = EdgeTracer(threshold=120).trace(edge_map)
        second = EdgeTracer(threshold=120).trace(edge_map)

        assert first == second
        assert len(first) > 0

    @pytest.mark.parametrize("seed", [0, 1, 2])
    def test_traces_are_disjoint(self, seed):
        from src.vectorization import EdgeTracer

        traces = EdgeTracer(threshold=100).trace(random_edge_map(seed))

        seen = set()
        for trace in traces:
            points = set(trace.points)
            assert len(points) == len(trace.points)
            assert not points & seen
            seen |= points

    @pytest.mark.parametrize("seed", [3, 4])
    def test_steps_are_eight_connected(self, seed):
        from src.vectorization import EdgeTracer

        edge_map = random_edge_map(seed)
        traces = EdgeTracer(threshold=90).trace(edge_map)

        for trace in traces:
            for (x0, y0), (x1, y1) in zip(trace.points, trace.points[1:]):
                assert max(abs(x1 - x0), abs(y1 - y0)) == 1
            for x, y in trace.points:
                assert 0 <= x < edge_map.width
                assert 0 <= y < edge_map.height
                assert edge_map.strength[y, x] > 90

    def test_traces_in_scan_order(self):
        from src.vectorization import EdgeTracer

        traces = EdgeTracer(threshold=100).trace(random_edge_map(5))
        starts = [(y, x) for x, y in (t.start for t in traces)]

        assert starts == sorted(starts)

    def test_invalid_cap_rejected(self):
        from src.vectorization import EdgeTracer

        with pytest.raises(ValueError):
            EdgeTracer(threshold=10, max_points=0)
