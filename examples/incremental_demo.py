#!/usr/bin/env python3
"""
Demo script driving a build in short time slices, the way a render loop would.
"""

import numpy as np
from py_voronoi.core import VoronoiBuilder, VoronoiOptions


def main():
    rng = np.random.default_rng(42)
    points = rng.uniform(0, 500, size=(2000, 2))

    builder = VoronoiBuilder(VoronoiOptions(work_budget_ms=5))
    rejected = []
    added = builder.add_sites(points, rejected)
    print(f"Accepted {added} sites, rejected {len(rejected)} near-duplicates")

    state = builder.create_build_state()
    frame = 0
    while not state.is_finished:
        units = state.do_timed_work()
        frame += 1
        if frame % 10 == 0:
            print(f"Frame {frame}: {units} units, sweepline at {state.sweepline.progress:.1f}, "
                  f"{len(state.shoreline)} arcs, {len(state.pending_events)} pending events")

    diagram = state.diagram()
    print(f"Finished after {frame} frames")
    print(f"  Edges: {len(diagram.edges)} ({len(diagram.bounded_edges)} bounded, "
          f"{len(diagram.open_edges)} open)")
    print(f"  Vertices: {len(diagram.vertices)}")
    extent = diagram.extent()
    print(f"  Extent: x {extent.min_x:.1f}..{extent.max_x:.1f}, "
          f"y {extent.min_y:.1f}..{extent.max_y:.1f}")


if __name__ == "__main__":
    main()
