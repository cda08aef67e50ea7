"""
RowForge - A distributed Monte Carlo path tracer

Renders a scene of spheres with unbiased path tracing:
- Diffuse, specular and refractive materials
- Russian roulette path termination
- 2x2 sub-pixel stratification with tent-filtered jitter
- Row ranges rendered independently by a fixed cohort of processes
- Gather of all row buffers on a coordinator, plain-text PPM output
"""

__version__ = "0.1.0"
__author__ = "RowForge Team"

from .vec3 import Vec3, Point3, Color
from .ray import Ray
from .materials import MaterialKind, ScatterResult, scatter
from .shapes import Sphere, Scene, HitRecord
from .scenes import cornell_box
from .camera import Camera, tent_sample
from .renderer import Renderer, RenderSettings, row_seed
from .tonemapping import clamp, to_int, apply_gamma, to_ldr
from .cohort import (
    Cohort, CohortError, BootstrapError, GatherError,
    RankTask, RankResult, WorkerInfo,
    partition_rows, handshake, render_rank, gather, get_platform_info
)
from .output import write_ppm, read_ppm, save_image
from .timing import TimingLog
from .logging_config import setup_logging
