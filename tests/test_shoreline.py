"""Tests for the shoreline: breakpoints, circle detection, arc insertion and removal."""

import math

import pytest
from py_voronoi.core.errors import DuplicateSiteError, VoronoiStructureError
from py_voronoi.core.events import CircleEvent
from py_voronoi.core.shoreline import Shoreline, compute_breakpoint, compute_event_circle
from py_voronoi.core.site import Site
from py_voronoi.core.sweepline import Sweepline

PROXY = Site.proxy(5.0, -50.0)


def site_ids(shoreline):
    return [arc.site.id for arc in shoreline]


class TestComputeBreakpoint:
    """Test breakpoint location between two arcs."""

    def test_equal_heights(self):
        """Test that sites at the same height meet halfway."""
        point = compute_breakpoint(Site(0, -5.0, 5.0), Site(1, 5.0, 5.0), 10.0)
        assert point == pytest.approx((0.0, 5.0))

    def test_equal_heights_wrong_order(self):
        """Test that a left site on the right has no breakpoint."""
        assert compute_breakpoint(Site(0, 5.0, 5.0), Site(1, -5.0, 5.0), 10.0) is None

    def test_vertical_arc(self):
        """Test a site lying on the sweepline."""
        point = compute_breakpoint(Site(0, 0.0, 0.0), Site(1, 0.0, 5.0), 5.0)
        assert point == pytest.approx((0.0, 2.5))

    def test_left_and_right_intersections(self):
        """Test that swapping the arcs picks the other intersection."""
        far = Site(0, 0.0, 0.0)
        near = Site(1, 4.0, 6.0)
        sweep_y = 10.0

        left_point = compute_breakpoint(far, near, sweep_y)
        right_point = compute_breakpoint(near, far, sweep_y)

        assert left_point[0] < right_point[0]
        for x, y in (left_point, right_point):
            assert math.hypot(x - far.x, y - far.y) == pytest.approx(sweep_y - y)
            assert math.hypot(x - near.x, y - near.y) == pytest.approx(sweep_y - y)

    def test_proxy_counts_as_farthest(self):
        """Test breakpoints between the proxy line and a real arc."""
        site = Site(0, 0.0, 0.0)
        root = math.sqrt(1100.0)

        assert compute_breakpoint(PROXY, site, 10.0) == pytest.approx((-root, -50.0))
        assert compute_breakpoint(site, PROXY, 10.0) == pytest.approx((root, -50.0))

    def test_two_proxies(self):
        """Test that proxy arcs never meet."""
        with pytest.raises(VoronoiStructureError):
            compute_breakpoint(PROXY, PROXY, 0.0)

    def test_duplicate_sites(self):
        """Test that coinciding sites overlap everywhere."""
        with pytest.raises(DuplicateSiteError):
            compute_breakpoint(Site(0, 0.0, 0.0), Site(1, 0.0, 0.0), 5.0)


class TestComputeEventCircle:
    """Test circle detection for arc triples."""

    def test_converging_triple(self):
        """Test the circumcircle of a converging triple."""
        circle = compute_event_circle(Site(2, 5.0, 10.0), Site(0, 0.0, 0.0), Site(1, 10.0, 0.0))

        assert circle.center == pytest.approx((5.0, 3.75))
        assert circle.radius == pytest.approx(6.25)

    def test_diverging_triple(self):
        """Test that diverging breakpoints never collapse the arc."""
        assert compute_event_circle(Site(1, 10.0, 0.0), Site(0, 0.0, 0.0), Site(2, 5.0, 10.0)) is None

    def test_proxy_between_sites(self):
        """Test that a proxy stretch closes on the proxy line."""
        circle = compute_event_circle(Site(0, 0.0, 0.0), PROXY, Site(1, 10.0, 0.0))

        assert circle.center == pytest.approx((5.0, -50.0))
        assert circle.radius == pytest.approx(math.hypot(5.0, 50.0))

    def test_proxy_between_unordered_sites(self):
        """Test that no event exists when the left site is not on the left."""
        assert compute_event_circle(Site(0, 10.0, 0.0), PROXY, Site(1, 0.0, 0.0)) is None

    def test_proxy_on_the_left(self):
        """Test an arc squeezed against the proxy line from the right."""
        middle = Site(0, 10.0, 0.0)
        right = Site(1, 5.0, 10.0)

        circle = compute_event_circle(PROXY, middle, right)

        assert circle.y == pytest.approx(-50.0)
        assert math.hypot(circle.x - middle.x, circle.y - middle.y) == pytest.approx(circle.radius)
        assert math.hypot(circle.x - right.x, circle.y - right.y) == pytest.approx(circle.radius)

    @pytest.mark.parametrize("middle,right", [
        (Site(0, 10.0, 10.0), Site(1, 5.0, 0.0)),
        (Site(0, 0.0, 0.0), Site(1, 5.0, 10.0)),
    ])
    def test_proxy_on_the_left_without_event(self, middle, right):
        """Test that higher or leftward middle arcs are not squeezed."""
        assert compute_event_circle(PROXY, middle, right) is None

    def test_proxy_on_the_right(self):
        """Test the mirrored case of a proxy arc on the right."""
        left = Site(1, 5.0, 10.0)
        middle = Site(0, 0.0, 0.0)

        circle = compute_event_circle(left, middle, PROXY)

        assert circle.y == pytest.approx(-50.0)
        assert math.hypot(circle.x - left.x, circle.y - left.y) == pytest.approx(circle.radius)

    def test_proxy_on_both_sides(self):
        """Test that an arc between two proxy arcs never collapses."""
        assert compute_event_circle(PROXY, Site(0, 0.0, 0.0), PROXY) is None

    def test_adjacent_proxies(self):
        """Test that adjacent proxy arcs are a structural error."""
        with pytest.raises(VoronoiStructureError):
            compute_event_circle(PROXY, PROXY, Site(0, 0.0, 0.0))


class TestShoreline:
    """Test arc insertion and removal."""

    @pytest.fixture
    def sweepline(self):
        return Sweepline()

    @pytest.fixture
    def shoreline(self, sweepline):
        """Shoreline holding the proxy arc and two sites at the same height."""
        shoreline = Shoreline()
        shoreline.insert_arc(PROXY, sweepline)
        for site in (Site(0, 0.0, 0.0), Site(1, 10.0, 0.0)):
            sweepline.advance(site.point)
            shoreline.insert_arc(site, sweepline)
        return shoreline

    def test_first_arc(self, sweepline):
        """Test that the first arc is inserted without a split."""
        shoreline = Shoreline()
        result = shoreline.insert_arc(PROXY, sweepline)

        assert result.first_arc
        assert len(shoreline) == 1
        assert shoreline.breakpoints() == []

    def test_split(self, sweepline):
        """Test that inserting a site splits the arc above it."""
        shoreline = Shoreline()
        shoreline.insert_arc(PROXY, sweepline)
        site = Site(0, 0.0, 0.0)
        sweepline.advance(site.point)

        result = shoreline.insert_arc(site, sweepline)

        assert not result.first_arc
        assert site_ids(shoreline) == [-1, 0, -1]
        assert result.split_point == pytest.approx((0.0, -50.0))
        assert not shoreline.arc(result.old_arc).active
        assert len(shoreline.breakpoints()) == 2

    def test_insert_order(self, shoreline, sweepline):
        """Test the arc order after two insertions."""
        assert site_ids(shoreline) == [-1, 0, -1, 1, -1]
        shoreline.check_invariants(sweepline)

    def test_breakpoint_links(self, shoreline):
        """Test that neighbor links agree with the arc order."""
        arcs = list(shoreline)
        for left, breakpoint, right in zip(arcs, shoreline.breakpoints(), arcs[1:]):
            assert breakpoint.left_arc == left.id
            assert breakpoint.right_arc == right.id
            assert left.right_breakpoint == breakpoint.id == right.left_breakpoint

    def test_duplicate_site(self, shoreline, sweepline):
        """Test that a site coinciding with a neighbor is rejected."""
        with pytest.raises(DuplicateSiteError):
            shoreline.insert_arc(Site(2, 0.0, 0.0), sweepline)

    def test_remove_requires_event(self, shoreline):
        """Test that an arc without a valid circle event cannot be removed."""
        arc = list(shoreline)[2]
        with pytest.raises(VoronoiStructureError):
            shoreline.remove_arc(arc.id)

    def test_remove(self, shoreline, sweepline):
        """Test collapsing the proxy stretch between the two sites."""
        arc = list(shoreline)[2]
        circle, sites = shoreline.event_circle(arc.id)
        event = CircleEvent(arc.id, circle, sites)
        arc.circle_event = event

        result = shoreline.remove_arc(arc.id)

        assert sites == (0, -1, 1)
        assert site_ids(shoreline) == [-1, 0, 1, -1]
        assert not shoreline.breakpoint(result.old_left_breakpoint).active
        assert not shoreline.breakpoint(result.old_right_breakpoint).active
        assert shoreline.breakpoint(result.new_breakpoint).left_arc == result.left_arc

        sweepline.advance(event.point)
        assert shoreline.breakpoint_location(result.new_breakpoint, sweepline.progress) == \
            pytest.approx((5.0, -50.0))
        shoreline.check_invariants(sweepline)

    def test_remove_inactive_arc(self, shoreline):
        """Test that split arcs cannot be removed."""
        with pytest.raises(VoronoiStructureError):
            shoreline.remove_arc(0)

    def test_repr(self, shoreline):
        """Test the compact arc listing."""
        assert repr(shoreline) == "Shoreline[P | 0 | P | 1 | P]"
