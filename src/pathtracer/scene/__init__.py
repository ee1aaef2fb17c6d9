"""Scene module for scene management and ray-scene queries.

Components:
    intersection: Surface list storage and closest-hit queries
    manager: Unified scene manager coordinating spheres and materials
    scenes: Built-in example scenes

Scene data is organized for efficient kernel access:
    - Structure-of-Arrays layout for sphere data
    - Unified material IDs mapped to per-type parameter fields
"""

from .intersection import (
    MAX_SPHERES,
    add_sphere,
    clear_scene,
    get_sphere_count,
    hit_world,
)
from .manager import (
    MAX_MATERIALS,
    MaterialInfo,
    MaterialType,
    SceneConfig,
    SceneManager,
    SphereInfo,
    get_material_type,
    get_material_type_index,
)
from .scenes import (
    SCENES,
    create_default_scene,
    create_glass_scene,
    create_single_sphere_scene,
    get_scene,
)

__all__ = [
    # Intersection module
    "add_sphere",
    "clear_scene",
    "get_sphere_count",
    "hit_world",
    "MAX_SPHERES",
    # Manager module
    "SceneManager",
    "MaterialType",
    "MaterialInfo",
    "SphereInfo",
    "SceneConfig",
    "MAX_MATERIALS",
    "get_material_type",
    "get_material_type_index",
    # Scenes module
    "SCENES",
    "get_scene",
    "create_default_scene",
    "create_glass_scene",
    "create_single_sphere_scene",
]
