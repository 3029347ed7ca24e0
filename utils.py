import numpy as np

def vec(list):
    """Handy shorthand to make a single-precision float array."""
    return np.array(list, dtype=np.float32)

def normalize(v):
    """Return a unit vector in the direction of the vector v."""
    return v / np.linalg.norm(v)


def reflect(d, n):
    """Reflect the direction d about the unit normal n.

    d points away from the surface (toward the light or the viewer), so to
    mirror a ray's direction pass its negation and negate the result.
    """
    return 2.0 * np.dot(d, n) * n - d

def refract(incident, normal, refractive_index):
    """Compute the refracted direction of `incident` using Snell's law.

    Parameters:
      incident : (3,) -- direction of the incoming ray (toward the surface)
      normal : (3,) -- outward-facing unit normal at the hit point
      refractive_index : float -- index of the material behind the surface
    Return:
      (3,) or None -- the refracted direction (not normalized), or None on
      total internal reflection
    """
    cosi = -np.clip(np.dot(normal, incident), -1.0, 1.0)
    etai = 1.0
    etat = refractive_index
    if cosi < 0:
        # leaving the medium
        cosi = -cosi
        etai, etat = etat, etai
        normal = -normal

    eta = etai / etat
    k = 1.0 - eta * eta * (1.0 - cosi * cosi)
    if k < 0:
        return None
    return eta * incident + (eta * cosi - np.sqrt(k)) * normal


def color_to_rgb(color):
    """Map a linear RGB color to 8 bits per channel.

    Colors brighter than 1 are scaled down by their largest channel so the
    hue survives, then everything is clamped to [0, 1] and truncated.
    """
    color = np.nan_to_num(np.asarray(color, dtype=np.float64), nan=0.0)
    max_c = np.max(color)
    if max_c > 1.0:
        color = color / max_c
    return (np.clip(color, 0.0, 1.0) * 255.0).astype(np.uint8)

def to_rgb8(img):
    """Apply color_to_rgb to every pixel of an (h, w, 3) image."""
    img = np.nan_to_num(np.asarray(img, dtype=np.float64), nan=0.0)
    max_c = np.max(img, axis=-1, keepdims=True)
    scale = np.where(max_c > 1.0, max_c, 1.0)
    return (np.clip(img / scale, 0.0, 1.0) * 255.0).astype(np.uint8)
