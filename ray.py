import numpy as np
from geometry import no_hit, Hit
from ImLite import Framebuffer
from utils import *

"""
Core implementation of the ray tracer.  Rays are traced Whitted-style: every hit
adds local Phong lighting from the point lights (with hard shadows) to recursively
traced mirror and refraction rays, each weighted by the material's albedo.
"""

MAX_DEPTH = 5 # default recursion budget
MAX_DEPTH_LIMIT = 10 # never recurse deeper than this, whatever is asked for
BACKGROUND_COLOR = vec([0.2, 0.7, 0.8])


class Ray:

    def __init__(self, origin, direction):
        """Create a ray with the given origin and direction.

        Parameters:
          origin : (3,) -- the start point of the ray, a 3D point
          direction : (3,) -- the direction of the ray (normalized by every caller in this module)
        """
        # double precision for the intersection math
        self.origin = np.array(origin, np.float64)
        self.direction = np.array(direction, np.float64)

class Camera:

    def __init__(self, eye=vec([0,0,0]), target=vec([0,0,-1]), up=vec([0,1,0]),
                 vfov=90.0, aspect=1.0):
        """Create a camera with given viewing parameters.

        Parameters:
          eye : (3,) -- the camera's location, aka viewpoint (a 3D point)
          target : (3,) -- where the camera is looking: a 3D point that appears centered in the view
          up : (3,) -- the camera's orientation: a 3D vector that appears straight up in the view
          vfov : float -- the full vertical field of view in degrees
          aspect : float -- the aspect ratio of the camera's view (ratio of width to height)
        """
        self.eye = vec(eye)
        self.aspect = aspect
        self.vfov = vfov

        self.w = normalize(self.eye - vec(target))
        self.u = normalize(np.cross(vec(up), self.w))
        self.v = np.cross(self.w, self.u)

        rads = np.radians(self.vfov)

        self.img_h_half = np.tan(rads / 2.0)
        self.img_w_half = self.aspect * self.img_h_half

    @classmethod
    def for_image(cls, width, height, fov=np.pi / 2):
        """Pinhole camera at the origin looking down -z.

        fov is the vertical field of view in radians; the aspect ratio follows
        the image size.
        """
        return cls(vfov=np.degrees(fov), aspect=width / height)

    def generate_ray(self, img_point):
        """Compute the ray corresponding to a point in the image.

        Parameters:
          img_point : (2,) -- a 2D point in [0,1] x [0,1], where (0,0) is the upper left
                      corner of the image and (1,1) is the lower right.
        Return:
          Ray -- The ray corresponding to that image location, with a unit direction
        """
        alpha = self.img_w_half * (img_point[0] * 2.0 - 1.0)
        beta = self.img_h_half * (1.0 - img_point[1] * 2.0)

        direction = (alpha * self.u) + (beta * self.v) - self.w

        return Ray(self.eye, normalize(direction))

    def pixel_ray(self, x, y, nx, ny):
        """Ray through the center of pixel (x, y) of an nx by ny image."""
        return self.generate_ray(np.array([(x + 0.5) / nx, (y + 0.5) / ny]))


class PointLight:

    def __init__(self, position, intensity):
        """Create a point light at given position and with given intensity

        Parameters:
          position : (3,) -- 3D point giving the light source location in scene
          intensity : float -- dimensionless brightness multiplier
        """
        if not intensity > 0:
            raise ValueError(f"light intensity must be positive, got {intensity}")
        self.position = vec(position)
        self.intensity = float(intensity)

    def illuminate(self, ray, hit, scene):
        """Compute the diffuse and specular intensity this light puts on a hit.

        Parameters:
          ray : Ray -- the ray that hit the surface
          hit : Hit -- the hit data
          scene : Scene -- the scene, for shadow rays
        Return:
          (float, float) -- diffuse and specular intensity, both zero in shadow
        """
        light_vec_full = self.position - hit.point
        light_dist = np.linalg.norm(light_vec_full)
        light_vec = light_vec_full / light_dist

        shadow_ray = Ray(hit.surface_point(light_vec), light_vec)
        if scene.is_occluded(shadow_ray, light_dist):
            return 0.0, 0.0

        p = hit.material.specular_exponent
        diffuse = self.intensity * max(0.0, np.dot(light_vec, hit.normal))
        specular = self.intensity * max(0.0, np.dot(reflect(-light_vec, hit.normal), ray.direction)) ** p
        return diffuse, specular


class Scene:

    def __init__(self, surfs, bg_color=BACKGROUND_COLOR):
        """Create a scene containing the given objects.

        Parameters:
          surfs : [Surface] -- list of the surfaces in the scene
          bg_color : (3,) -- RGB color that is seen where no objects appear
        """
        self.surfs = list(surfs)
        self.bg_color = vec(bg_color)

    def intersect(self, ray):
        """Computes the first (smallest t) intersection between a ray and the scene.

        Parameters:
          ray : Ray -- the ray to intersect with the scene
        Return:
          Hit -- the hit data, no_hit if nothing is hit
        """
        closest_t = np.inf
        closest_surf = None

        for surf in self.surfs:
            t = surf.intersect(ray)
            # NaN never compares less, so it is skipped
            if t is not None and t < closest_t:
                closest_t = t
                closest_surf = surf

        if closest_surf is None:
            return no_hit

        point = ray.origin + ray.direction * closest_t
        return Hit(closest_t, point, closest_surf.normal_at(point), closest_surf.material)

    def is_occluded(self, ray, max_dist):
        """Return True if the nearest surface along ray is closer than max_dist."""
        hit = self.intersect(ray)
        if hit.t == np.inf:
            return False
        return np.linalg.norm(hit.point - ray.origin) < max_dist


def clamp_depth(depth):
    """Bound a requested recursion depth to [0, MAX_DEPTH_LIMIT]."""
    if not np.isfinite(depth):
        raise ValueError(f"recursion depth must be a finite number, got {depth}")
    return int(min(max(depth, 0), MAX_DEPTH_LIMIT))


def cast_ray(ray, scene, lights, depth=MAX_DEPTH):
    """Compute the color seen along a ray.

    Parameters:
      ray : Ray -- the ray to trace
      scene : Scene -- the scene
      lights : [PointLight] -- the lights
      depth : int -- remaining recursion budget; at zero the background is returned
    Return:
      (3,) -- the linear RGB color seen along this ray
    """
    if depth <= 0:
        return scene.bg_color

    hit = scene.intersect(ray)
    if hit.t == np.inf:
        return scene.bg_color

    mat = hit.material
    albedo = mat.albedo

    diffuse_intensity = 0.0
    specular_intensity = 0.0
    for light in lights:
        diffuse, specular = light.illuminate(ray, hit, scene)
        diffuse_intensity += diffuse
        specular_intensity += specular

    color = mat.diffuse_color * (diffuse_intensity * albedo[0]) \
        + np.ones(3) * (specular_intensity * albedo[1])

    # mirror
    if albedo[2] > 0:
        reflect_dir = normalize(-reflect(ray.direction, hit.normal))
        reflect_ray = Ray(hit.surface_point(reflect_dir), reflect_dir)
        color = color + cast_ray(reflect_ray, scene, lights, depth - 1) * albedo[2]

    # refraction; total internal reflection leaves no refracted ray
    if albedo[3] > 0:
        refract_dir = refract(ray.direction, hit.normal, mat.refractive_index)
        if refract_dir is not None:
            refract_dir = normalize(refract_dir)
            refract_ray = Ray(hit.surface_point(refract_dir), refract_dir)
            color = color + cast_ray(refract_ray, scene, lights, depth - 1) * albedo[3]

    return color


def render_image(camera, scene, lights, nx, ny, depth=MAX_DEPTH, sink=None, verbose=True):
    """Render a ray traced image.

    Parameters:
      camera : Camera -- the camera defining the view
      scene : Scene -- the scene to be rendered
      lights : [PointLight] -- the lights illuminating the scene
      nx, ny : int -- the dimensions of the rendered image
      depth : int -- recursion budget per primary ray, clamped to MAX_DEPTH_LIMIT
      sink : Framebuffer -- where pixels go in raster order (a fresh one by default)
      verbose : bool -- print progress per row
    Returns:
      (ny, nx, 3) float32 -- the linear RGB image
    """
    depth = clamp_depth(depth)
    if sink is None:
        sink = Framebuffer(nx, ny)

    for i in range(ny):
        if verbose:
            print(f"rendering row {i+1}/{ny}...")
        for j in range(nx):
            ray = camera.pixel_ray(j, i, nx, ny)
            sink.put(cast_ray(ray, scene, lights, depth))

    return sink.pixels
