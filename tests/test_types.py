from plateblur.core.types import Detection, RedactionRegion


class TestDetection:
    def test_from_box_2d_keeps_order(self):
        det = Detection.from_box_2d([10, 20, 30, 40], "plate")
        assert (det.ymin, det.xmin, det.ymax, det.xmax) == (10.0, 20.0, 30.0, 40.0)
        assert det.box_2d == (10.0, 20.0, 30.0, 40.0)
        assert det.label == "plate"

    def test_inverted_box_is_not_swapped(self):
        det = Detection.from_box_2d([300, 300, 100, 100])
        assert det.ymin > det.ymax
        assert det.xmin > det.xmax


class TestRedactionRegion:
    def test_edges_and_area(self):
        r = RedactionRegion(x=5, y=6, width=30, height=20)
        assert r.x2 == 35
        assert r.y2 == 26
        assert r.area == 600
        assert not r.is_empty

    def test_clamp_inside_bounds(self):
        r = RedactionRegion(x=-10, y=-5, width=50, height=200).clamp(30, 40)
        assert (r.x, r.y, r.width, r.height) == (0, 0, 30, 40)

    def test_clamp_negative_size_becomes_empty(self):
        r = RedactionRegion(x=10, y=10, width=-5, height=8).clamp(100, 100)
        assert r.width == 0
        assert r.is_empty

    def test_clamp_fully_outside(self):
        r = RedactionRegion(x=150, y=150, width=10, height=10).clamp(100, 100)
        assert r.is_empty
        assert r.x2 <= 100 and r.y2 <= 100

    def test_contains_point_is_half_open(self):
        r = RedactionRegion(x=5, y=5, width=30, height=30)
        assert r.contains_point(5, 5)
        assert r.contains_point(34.9, 34.9)
        assert not r.contains_point(35, 10)

    def test_slices(self):
        rows, cols = RedactionRegion(x=5, y=7, width=3, height=2).slices()
        assert (rows.start, rows.stop) == (7, 9)
        assert (cols.start, cols.stop) == (5, 8)
