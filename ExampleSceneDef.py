import numpy as np
import ray
from ImLite import Framebuffer
from geometry import Sphere
from materials import IVORY, GLASS, RED_RUBBER, MIRROR
from utils import vec

class ExampleSceneDef(object):
    def __init__(self, camera, scene, lights, output_shape=None):
        self.camera = camera;
        self.scene = scene;
        self.lights = lights;
        if(output_shape is None):
            output_shape = [768, 1024];
        self.output_shape = output_shape;

    def render(self, output_path=None, output_shape=None, depth=ray.MAX_DEPTH, verbose=True):
        """Render the scene to an Image, also writing it to output_path if given."""
        if(output_shape is None):
            output_shape = self.output_shape;
        ny, nx = output_shape;
        fb = Framebuffer(nx, ny);
        ray.render_image(self.camera, self.scene, self.lights, nx, ny, depth=depth, sink=fb, verbose=verbose);
        im = fb.image();
        if(output_path is not None):
            im.writeToFile(output_path);
        return im;


def FourSpheresExample(width=1024, height=768, fov=np.pi / 2):
    scene = ray.Scene([
        Sphere(vec([-3, 0, -16]), 2, IVORY),
        Sphere(vec([-1, -1.5, -12]), 2, GLASS),
        Sphere(vec([1.5, -0.5, -18]), 3, RED_RUBBER),
        Sphere(vec([7, 5, -18]), 4, MIRROR),
    ])

    lights = [
        ray.PointLight(vec([-20, 20, 20]), 1.5),
        ray.PointLight(vec([30, 50, -25]), 1.8),
        ray.PointLight(vec([30, 20, 30]), 1.7),
    ]

    camera = ray.Camera.for_image(width, height, fov)
    return ExampleSceneDef(camera=camera, scene=scene, lights=lights, output_shape=[height, width]);


def SingleSphereExample(width=64, height=64, fov=np.pi / 2):
    # one ivory ball straight ahead, lit from above and to the left
    scene = ray.Scene([
        Sphere(vec([0, 0, -5]), 1, IVORY),
    ])

    lights = [
        ray.PointLight(vec([-2, 2, 0]), 1.5),
    ]

    camera = ray.Camera.for_image(width, height, fov)
    return ExampleSceneDef(camera=camera, scene=scene, lights=lights, output_shape=[height, width]);


SCENES = {
    'four_spheres': FourSpheresExample,
    'single_sphere': SingleSphereExample,
}
