import numpy as np
from utils import vec, normalize

EPSILON = 1e-3 # for offsetting secondary rays off the surface

class Hit:
    def __init__(self, t, point=None, normal=None, material=None):
        """Create a Hit with the given data.

        Parameters:
          t : float -- the t value of the intersection along the ray
          point : (3,) -- the 3D point where the intersection happens
          normal : (3,) -- the 3D outward-facing unit normal to the surface at the hit point
          material : (Material) -- the material of the surface
        """
        self.t = t
        self.point = point
        self.normal = normal
        self.material = material

    def surface_point(self, direction):
        """Origin for a secondary ray leaving this hit in the given direction.

        The hit point is nudged by EPSILON along the normal, onto the side of
        the surface the new ray travels into, so the ray does not re-hit the
        surface it starts on.
        """
        if np.dot(direction, self.normal) < 0:
            return self.point - self.normal * EPSILON
        return self.point + self.normal * EPSILON

# Value to represent absence of an intersection
no_hit = Hit(np.inf)


class Surface:
    """Something a ray can hit.

    Subclasses provide `material`, `intersect` and `normal_at`; the scene
    only ever talks to surfaces through these three.
    """

    material = None

    def intersect(self, ray):
        """Return the smallest non-negative t at which ray hits the surface, or None."""
        raise NotImplementedError

    def normal_at(self, point):
        """Return the outward unit normal at a point on the surface."""
        raise NotImplementedError


class Sphere(Surface):

    def __init__(self, center, radius, material):
        """Create a sphere with the given center and radius.

        Parameters:
          center : (3,) -- a 3D point specifying the sphere's center
          radius : float -- a Python float specifying the sphere's radius
          material : Material -- the material of the surface
        """
        if not radius > 0:
            raise ValueError(f"sphere radius must be positive, got {radius}")
        self.center = vec(center)
        self.radius = float(radius)
        self.material = material

    def intersect(self, ray):
        """Computes the first non-negative intersection between a ray and this sphere.

        Parameters:
          ray : Ray -- the ray to intersect with the sphere
        Return:
          float or None -- the distance t along the ray, None on a miss
        """
        oc = self.center - ray.origin
        tca = np.dot(oc, ray.direction)
        d2 = np.dot(oc, oc) - tca * tca
        r2 = self.radius * self.radius
        if d2 > r2:
            return None

        thc = np.sqrt(r2 - d2)
        t0 = tca - thc
        if t0 < 0:
            # origin is inside the sphere or the sphere is behind it
            t1 = tca + thc
            if t1 < 0:
                return None
            return float(t1)
        return float(t0)

    def normal_at(self, point):
        return normalize(point - self.center)

    def __repr__(self):
        return f"Sphere(center={self.center.tolist()}, radius={self.radius})"
