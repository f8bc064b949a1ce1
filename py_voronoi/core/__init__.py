"""
Incremental sweepline Voronoi construction.
"""

from ..config import configure_logging
from .build_state import BuildProgressStep, VoronoiBuildState, VoronoiOptions
from .builder import VoronoiBuilder
from .diagram import PartialEdge, VoronoiDiagram, VoronoiEdge, assemble_diagram
from .errors import DuplicateSiteError, SweeplineError, VoronoiStructureError
from .events import CircleEvent, EventSchedule, EventType, SiteEvent
from .functions import Function, FunctionKind, IntersectionResult
from .geometry import EPSILON, Bounds, Circle, nearly_equal
from .shoreline import Shoreline, compute_breakpoint, compute_event_circle
from .site import PROXY_SITE_ID, Site
from .sweepline import Sweepline

configure_logging()

__all__ = ['BuildProgressStep', 'VoronoiBuildState', 'VoronoiOptions', 'VoronoiBuilder',
           'PartialEdge', 'VoronoiDiagram', 'VoronoiEdge', 'assemble_diagram',
           'DuplicateSiteError', 'SweeplineError', 'VoronoiStructureError',
           'CircleEvent', 'EventSchedule', 'EventType', 'SiteEvent',
           'Function', 'FunctionKind', 'IntersectionResult',
           'EPSILON', 'Bounds', 'Circle', 'nearly_equal',
           'Shoreline', 'compute_breakpoint', 'compute_event_circle',
           'PROXY_SITE_ID', 'Site', 'Sweepline']
