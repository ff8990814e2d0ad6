"""The World: an ordered collection of spheres sharing a material arena.

A World is built on the host, then uploaded to the device fields read by the
render kernel. Materials are interned: every distinct material is stored once
and spheres refer to it by index, so any number of spheres can share one
material without copying it.

Example:
    >>> from rtweekend.materials import Lambertian, Metal
    >>> from rtweekend.scene.world import World
    >>> world = World()
    >>> ground = Lambertian((0.8, 0.8, 0.0))
    >>> world.add_sphere((0.0, -100.5, -1.0), 100.0, ground)
    >>> world.add_sphere((1.0, 0.0, -1.0), 0.5, Metal((0.8, 0.6, 0.2), fuzz=0.0))
    >>> len(world)
    2
"""

from collections.abc import Iterator

from rtweekend.core.ray import Vec3Tuple
from rtweekend.geometry.sphere import DEFAULT_T_MAX, DEFAULT_T_MIN, Sphere, SurfaceHit
from rtweekend.materials.material import Material, validate_material


class World:
    """Ordered sphere collection with closest-hit queries.

    Insertion order only matters for ties: when two spheres are hit at exactly
    the same distance, the one added first wins.
    """

    def __init__(self) -> None:
        self._spheres: list[Sphere] = []
        self._materials: list[Material] = []
        self._material_ids: dict[Material, int] = {}

    def __len__(self) -> int:
        return len(self._spheres)

    def __iter__(self) -> Iterator[Sphere]:
        return iter(self._spheres)

    @property
    def spheres(self) -> tuple[Sphere, ...]:
        return tuple(self._spheres)

    @property
    def materials(self) -> tuple[Material, ...]:
        """Distinct materials in id order."""
        return tuple(self._materials)

    def add_material(self, material: Material) -> int:
        """Intern a material and return its id.

        Equal materials (same variant and parameters) share one id.

        Raises:
            ValueError: If material is not Lambertian, Metal or Dielectric.
        """
        validate_material(material)
        material_id = self._material_ids.get(material)
        if material_id is None:
            material_id = len(self._materials)
            self._materials.append(material)
            self._material_ids[material] = material_id
        return material_id

    def material_id(self, material: Material) -> int:
        """Look up the id of a material already in the World.

        Raises:
            KeyError: If the material was never added.
        """
        return self._material_ids[material]

    def add(self, sphere: Sphere) -> Sphere:
        """Append an already constructed sphere."""
        if not isinstance(sphere, Sphere):
            raise ValueError(f"Expected a Sphere, got {sphere!r}")
        self.add_material(sphere.material)
        self._spheres.append(sphere)
        return sphere

    def add_sphere(self, center: Vec3Tuple, radius: float, material: Material) -> Sphere:
        """Create a sphere and append it.

        Raises:
            ValueError: If the radius is not positive, the center is not a
                finite 3-vector, or the material is unsupported.
        """
        return self.add(Sphere(center=center, radius=radius, material=material))

    def upload(self) -> None:
        """Copy the spheres and material table to the device.

        Replaces whatever scene was uploaded before. Requires ti.init().
        """
        from rtweekend.materials.registry import load_materials
        from rtweekend.scene.intersection import load_spheres

        load_materials(self._materials)
        load_spheres(
            [sphere.center for sphere in self._spheres],
            [sphere.radius for sphere in self._spheres],
            [self._material_ids[sphere.material] for sphere in self._spheres],
        )

    def hit(
        self,
        ray_origin: Vec3Tuple,
        ray_direction: Vec3Tuple,
        t_min: float = DEFAULT_T_MIN,
        t_max: float = DEFAULT_T_MAX,
    ) -> SurfaceHit | None:
        """Find the closest sphere hit within (t_min, t_max).

        Uploads this World first, so it replaces any previously loaded scene.

        Returns:
            The SurfaceHit of the closest sphere, or None on a miss.
        """
        from rtweekend.scene.intersection import query_scene

        self.upload()
        result = query_scene(ray_origin, ray_direction, t_min, t_max)
        if result is None:
            return None
        t, point, normal, front_face, material_id = result
        return SurfaceHit(
            t=t,
            point=point,
            normal=normal,
            front_face=front_face,
            material=self._materials[material_id],
        )
