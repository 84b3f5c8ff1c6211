"""Reference box scene.

This module builds the scene rendered by default: a closed box spanning
[-1, 1] on every axis (open towards the camera), a single diffuse sphere
resting near the floor and a square area light just below the ceiling.

The box consists of:
- Floor, ceiling and back wall: white
- Left wall: red
- Right wall: green
- Sphere: color (2, 2, 2), centered at (0, -0.7, -0.5) with radius 0.3
- Area light: emissive white square at y = 0.99 spanning [-0.5, 0.5] in x and z

Every wall and the light are made of two triangles. The camera sits at
(0, 0, 5) looking down -Z through the open front.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.pathtracer.scene.cornell_box import create_cornell_box_scene
    >>> scene = create_cornell_box_scene()
    >>> len(scene)
    13
"""

from dataclasses import dataclass

from src.pathtracer.config import EPSILON
from src.pathtracer.scene.scene import PrimitiveInfo, Scene, SphereInfo, TriangleInfo

Color = tuple[float, float, float]

# =============================================================================
# Box Constants
# =============================================================================

# Half the edge length of the box
BOX_HALF_SIZE = 1.0

# Height of the light, just below the ceiling
LIGHT_HEIGHT = 0.99

# Half the edge length of the square light
LIGHT_HALF_SIZE = 0.5

SPHERE_CENTER = (0.0, -0.7, -0.5)
SPHERE_RADIUS = 0.3

WHITE = (1.0, 1.0, 1.0)
RED = (1.0, 0.0, 0.0)
GREEN = (0.0, 1.0, 0.0)


@dataclass
class CornellBoxParams:
    """Colors for the reference scene.

    All parameters default to the reference configuration.

    Attributes:
        sphere_color: Color of the sphere. Values above 1 brighten the
            paths that bounce off it.
        floor_color: Color of the floor.
        ceiling_color: Color of the ceiling.
        back_wall_color: Color of the back wall.
        left_wall_color: Color of the left wall (red by default).
        right_wall_color: Color of the right wall (green by default).
        light_color: Emitted radiance of the area light.
    """

    sphere_color: Color = (2.0, 2.0, 2.0)
    floor_color: Color = WHITE
    ceiling_color: Color = WHITE
    back_wall_color: Color = WHITE
    left_wall_color: Color = RED
    right_wall_color: Color = GREEN
    light_color: Color = WHITE


def get_cornell_box_primitives(params: CornellBoxParams | None = None) -> list[PrimitiveInfo]:
    """List the primitives of the reference scene, in scene order.

    Triangle windings follow the reference scene, so face normals of the
    floor, ceiling and walls point into the box (the light faces down).

    Args:
        params: Optional color overrides. Defaults to CornellBoxParams().

    Returns:
        The sphere followed by the floor, light, ceiling, left, right and
        back triangles.
    """
    if params is None:
        params = CornellBoxParams()

    s = BOX_HALF_SIZE
    h = LIGHT_HEIGHT
    q = LIGHT_HALF_SIZE

    return [
        SphereInfo(center=SPHERE_CENTER, radius=SPHERE_RADIUS, color=params.sphere_color),
        # Floor (y = -1)
        TriangleInfo((s, -s, s), (-s, -s, -s), (-s, -s, s), params.floor_color),
        TriangleInfo((s, -s, s), (s, -s, -s), (-s, -s, -s), params.floor_color),
        # Area light (y = 0.99)
        TriangleInfo((-q, h, q), (-q, h, -q), (q, h, q), params.light_color, emissive=True),
        TriangleInfo((-q, h, -q), (q, h, -q), (q, h, q), params.light_color, emissive=True),
        # Ceiling (y = 1)
        TriangleInfo((-s, s, s), (-s, s, -s), (s, s, s), params.ceiling_color),
        TriangleInfo((-s, s, -s), (s, s, -s), (s, s, s), params.ceiling_color),
        # Left wall (x = -1)
        TriangleInfo((-s, -s, -s), (-s, s, s), (-s, -s, s), params.left_wall_color),
        TriangleInfo((-s, -s, -s), (-s, s, -s), (-s, s, s), params.left_wall_color),
        # Right wall (x = 1)
        TriangleInfo((s, s, s), (s, -s, -s), (s, -s, s), params.right_wall_color),
        TriangleInfo((s, -s, -s), (s, s, s), (s, s, -s), params.right_wall_color),
        # Back wall (z = -1)
        TriangleInfo((s, -s, -s), (-s, s, -s), (-s, -s, -s), params.back_wall_color),
        TriangleInfo((s, -s, -s), (s, s, -s), (-s, s, -s), params.back_wall_color),
    ]


def create_cornell_box_scene(
    params: CornellBoxParams | None = None,
    epsilon: float = EPSILON,
) -> Scene:
    """Create the reference scene.

    Args:
        params: Optional color overrides. Defaults to CornellBoxParams().
        epsilon: Minimum ray parameter accepted as a hit.

    Returns:
        A Scene with 13 primitives (1 sphere, 12 triangles).
    """
    return Scene.from_infos(get_cornell_box_primitives(params), epsilon=epsilon)
