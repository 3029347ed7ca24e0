import numpy as np
from utils import vec

class Material:

    def __init__(self, albedo, diffuse_color, specular_exponent=50., refractive_index=1.0):
        """
        Create a new material with the given parameters.

        Parameters:
          albedo : (4,) -- weights of the diffuse, specular, reflective and
                   refractive contributions (independent, need not sum to 1)
          diffuse_color : (3,) -- Diffuse color
          specular_exponent : float -- Phong shininess
          refractive_index : float -- Index of Refraction (1.0 for air, 1.5 for glass)
        """
        albedo = vec(albedo)
        if albedo.shape != (4,):
            raise ValueError(f"albedo must have 4 components, got shape {albedo.shape}")
        if np.any(albedo < 0):
            raise ValueError(f"albedo weights must be non-negative, got {albedo}")
        if not specular_exponent > 0:
            raise ValueError(f"specular_exponent must be positive, got {specular_exponent}")
        if not refractive_index > 0:
            raise ValueError(f"refractive_index must be positive, got {refractive_index}")

        self.albedo = albedo
        self.diffuse_color = vec(diffuse_color)
        self.specular_exponent = float(specular_exponent)
        self.refractive_index = float(refractive_index)

        self.albedo.flags.writeable = False
        self.diffuse_color.flags.writeable = False

    def __repr__(self):
        return (f"Material(albedo={self.albedo.tolist()}, diffuse_color={self.diffuse_color.tolist()}, "
                f"specular_exponent={self.specular_exponent}, refractive_index={self.refractive_index})")


IVORY = Material(albedo=[0.6, 0.3, 0.1, 0.0], diffuse_color=[0.4, 0.4, 0.3], specular_exponent=50.)
GLASS = Material(albedo=[0.0, 0.5, 0.1, 0.8], diffuse_color=[0.6, 0.7, 0.8], specular_exponent=125., refractive_index=1.5)
RED_RUBBER = Material(albedo=[0.9, 0.1, 0.0, 0.0], diffuse_color=[0.3, 0.1, 0.1], specular_exponent=10.)
MIRROR = Material(albedo=[0.0, 10.0, 0.8, 0.0], diffuse_color=[1.0, 1.0, 1.0], specular_exponent=1425.)
