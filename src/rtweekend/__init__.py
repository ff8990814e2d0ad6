"""A Taichi-based path tracer for sphere scenes.

This package renders scenes of spheres with Lambertian, metal and dielectric
materials through a thin-lens camera, producing gamma-corrected pixel buffers
that can be written to PPM/PNG or shown in a live preview window.

Subpackages:
    core: Vectors, rays, random streams, the integrator and the render loop
    geometry: Sphere primitive and ray-sphere intersection
    materials: Surface scattering models
    scene: The World container, device intersection and preset scenes
    camera: Thin-lens camera with ray generation
    preview: File export and preview windows

Modules that allocate Taichi fields (the integrator, renderer, camera, material
registry and scene intersection) must be imported after ti.init().
"""

__version__ = "0.1.0"
