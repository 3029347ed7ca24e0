import unittest
import numpy as np
from ray import *
from geometry import Sphere, Surface, Hit
from materials import Material, IVORY
from ExampleSceneDef import SingleSphereExample
from utils import normalize, vec

def assert_direction_matches(v, w):
    np.testing.assert_almost_equal(normalize(v), normalize(w))


def flipy_vec(vect):
    v = vec(vect);
    v[1] = 1-v[1];
    return v;

DIFFUSE_WHITE = Material(albedo=[1, 0, 0, 0], diffuse_color=[1, 1, 1])

class TestSphereIntersect(unittest.TestCase):

    def confirm_hit(self, sphere, ray):
        # make sure the scene builds a self-consistent hit, then return it
        hit = Scene([sphere]).intersect(ray)
        self.assertLess(hit.t, np.inf)
        np.testing.assert_almost_equal(ray.origin + hit.t * ray.direction, hit.point)
        np.testing.assert_almost_equal(normalize(hit.point - sphere.center), hit.normal, decimal=5)
        self.assertAlmostEqual(np.linalg.norm(hit.point - sphere.center), sphere.radius, places=5)
        self.assertIs(hit.material, sphere.material)
        return hit

    def test_unitsphere_hits(self):
        unit_sphere = Sphere(vec([0,0,0]), 1.0, IVORY)
        # dead center hit
        hit = self.confirm_hit(unit_sphere, Ray(vec([2.0,0.0,0.0]), vec([-1.0,0.0,0.0])))
        self.assertAlmostEqual(hit.t, 1.0)
        # off center hit
        hit = self.confirm_hit(unit_sphere, Ray(vec([1.0,0.5,0.0]), vec([-1.0,0.0,0.0])))
        self.assertAlmostEqual(hit.t, 1 - np.sin(np.pi/3))
        # center hit from off axis
        hit = self.confirm_hit(unit_sphere, Ray(vec([2.0,3.0,4.0]), normalize(vec([-2.0,-3.0,-4.0]))))
        self.assertAlmostEqual(hit.t, np.sqrt(29) - 1, places=5)

    def test_unitsphere_misses(self):
        unit_sphere = Sphere(vec([0,0,0]), 1.0, IVORY)
        # on axis miss
        self.assertIsNone(unit_sphere.intersect(Ray(vec([2.0,3.0,0.0]), vec([-1.0,0.0,0.0]))))
        # pointing directly away
        self.assertIsNone(unit_sphere.intersect(Ray(vec([2.0,0.0,0.0]), vec([1.0,0.0,0.0]))))
        self.assertEqual(Scene([unit_sphere]).intersect(Ray(vec([2.0,0.0,0.0]), vec([1.0,0.0,0.0]))).t, np.inf)

    def test_inside_returns_exit_point(self):
        unit_sphere = Sphere(vec([0,0,0]), 1.0, IVORY)
        self.assertAlmostEqual(unit_sphere.intersect(Ray(vec([0,0,0]), vec([1,0,0]))), 1.0)
        hit = self.confirm_hit(unit_sphere, Ray(vec([0.5,0,0]), vec([-1,0,0])))
        self.assertAlmostEqual(hit.t, 1.5)
        # the normal still points away from the center
        np.testing.assert_almost_equal(hit.normal, [-1, 0, 0])

    def test_nonunit_hits(self):
        # the unit cases scaled by 3 and shifted by (-1, -5, -7)
        sphere = Sphere(vec([-1,-5,-7]), 3.0, IVORY)
        hit = self.confirm_hit(sphere, Ray(vec([5.0,-5.0,-7.0]), vec([-1.0,0.0,0.0])))
        self.assertAlmostEqual(hit.t, 3.0, places=5)
        hit = self.confirm_hit(sphere, Ray(vec([2.0,-3.5,-7.0]), vec([-1.0,0.0,0.0])))
        self.assertAlmostEqual(hit.t, 3 * (1 - np.sin(np.pi/3)), places=5)

    def test_bad_radius(self):
        with self.assertRaises(ValueError):
            Sphere(vec([0,0,0]), 0.0, IVORY)
        with self.assertRaises(ValueError):
            Sphere(vec([0,0,0]), -1.0, IVORY)


class NaNSurface(Surface):
    material = IVORY

    def intersect(self, ray):
        return float('nan')

    def normal_at(self, point):
        return vec([0,0,1])


class TestSceneIntersect(unittest.TestCase):

    def test_nearest_hit_wins(self):
        near = Sphere(vec([0,0,-5]), 1.0, IVORY)
        far = Sphere(vec([0,0,-10]), 1.0, DIFFUSE_WHITE)
        for surfs in ([near, far], [far, near]):
            hit = Scene(surfs).intersect(Ray(vec([0,0,0]), vec([0,0,-1])))
            self.assertAlmostEqual(hit.t, 4.0)
            self.assertIs(hit.material, IVORY)

    def test_empty_scene(self):
        self.assertEqual(Scene([]).intersect(Ray(vec([0,0,0]), vec([0,0,-1]))).t, np.inf)

    def test_nan_distance_is_ignored(self):
        sphere = Sphere(vec([0,0,-5]), 1.0, DIFFUSE_WHITE)
        scene = Scene([NaNSurface(), sphere])
        hit = scene.intersect(Ray(vec([0,0,0]), vec([0,0,-1])))
        self.assertAlmostEqual(hit.t, 4.0)
        self.assertIs(hit.material, DIFFUSE_WHITE)
        self.assertEqual(Scene([NaNSurface()]).intersect(Ray(vec([0,0,0]), vec([0,0,-1]))).t, np.inf)

    def test_occlusion_distance(self):
        scene = Scene([Sphere(vec([0,0,-5]), 1.0, IVORY)])
        ray = Ray(vec([0,0,0]), vec([0,0,-1]))
        self.assertTrue(scene.is_occluded(ray, 10.0))
        self.assertFalse(scene.is_occluded(ray, 3.0))
        self.assertFalse(scene.is_occluded(Ray(vec([0,0,0]), vec([0,0,1])), 10.0))


class TestHit(unittest.TestCase):

    def test_surface_point_follows_direction(self):
        hit = Hit(1.0, vec([0,1,0]), vec([0,1,0]), IVORY)
        np.testing.assert_allclose(hit.surface_point(vec([1,1,0])), [0, 1.001, 0], rtol=1e-6)
        np.testing.assert_allclose(hit.surface_point(vec([1,-1,0])), [0, 0.999, 0], rtol=1e-6)


class TestReflectRefract(unittest.TestCase):

    def test_reflect(self):
        n = vec([0,1,0])
        np.testing.assert_almost_equal(reflect(vec([1,1,0]), n), [-1, 1, 0])

    def test_reflect_involution(self):
        rng = np.random.default_rng(7)
        for _ in range(20):
            n = normalize(rng.normal(size=3))
            d = rng.normal(size=3)
            r = reflect(d, n)
            np.testing.assert_almost_equal(reflect(r, n), d)
            np.testing.assert_almost_equal(-reflect(-r, n), d)

    def test_index_one_keeps_direction(self):
        n = vec([0,0,1])
        for d in ([0.3, 0.2, -1], [0.3, 0.2, 1], [0, 0, -1]):
            d = normalize(np.array(d, np.float64))
            np.testing.assert_almost_equal(refract(d, n, 1.0), d)

    def test_snell(self):
        # 45 degrees into glass
        n = np.array([0.0, 1.0, 0.0])
        d = normalize(np.array([1.0, -1.0, 0.0]))
        t = normalize(refract(d, n, 1.5))
        sin_t = t[0]
        self.assertAlmostEqual(sin_t, np.sin(np.pi/4) / 1.5)
        self.assertLess(t[1], 0)

    def test_total_internal_reflection(self):
        # grazing exit from glass
        n = np.array([0.0, 1.0, 0.0])
        d = normalize(np.array([1.0, 0.1, 0.0]))
        self.assertIsNone(refract(d, n, 1.5))


class TestCamera(unittest.TestCase):

    def test_default_camera(self):
        # A camera located at the origin facing the -z direction
        cam = Camera()
        # Center ray is straight down the axis
        ray = cam.generate_ray(flipy_vec([0.5, 0.5]))
        np.testing.assert_almost_equal(ray.origin, vec([0,0,0]))
        assert_direction_matches(ray.direction, vec([0,0,-1]))
        # FOV is 90 degrees, so corner rays are centered in octants
        ray = cam.generate_ray(flipy_vec([0, 0]))
        assert_direction_matches(ray.direction, vec([-1,-1,-1]))
        ray = cam.generate_ray(flipy_vec([1, 0]))
        assert_direction_matches(ray.direction, vec([ 1,-1,-1]))
        ray = cam.generate_ray(flipy_vec([0, 1]))
        assert_direction_matches(ray.direction, vec([-1, 1,-1]))

    def test_pixel_rays(self):
        width, height, fov = 8, 5, np.pi / 3
        cam = Camera.for_image(width, height, fov)
        s = np.tan(fov / 2)
        for x, y in [(0, 0), (7, 4), (3, 2), (5, 1)]:
            expected = normalize(np.array([
                (2 * (x + 0.5) / width - 1) * s * width / height,
                -(2 * (y + 0.5) / height - 1) * s,
                -1.0,
            ]))
            ray = cam.pixel_ray(x, y, width, height)
            np.testing.assert_almost_equal(ray.origin, vec([0,0,0]))
            np.testing.assert_almost_equal(ray.direction, expected, decimal=5)
            self.assertAlmostEqual(np.linalg.norm(ray.direction), 1.0, places=5)

    def test_arbitrary_frame(self):
        # A camera that lines up with nothing in particular
        eye = vec([3,4,5])
        target = vec([6,7,8])
        up = vec([1,2,3])
        cam = Camera(eye=eye, target=target, up=up, vfov=47)
        # Center ray points towards target
        ray = cam.generate_ray(flipy_vec([0.5, 0.5]))
        np.testing.assert_almost_equal(ray.origin, eye)
        assert_direction_matches(ray.direction, target - eye)


class TestPointLight(unittest.TestCase):

    def shading_test(self, n, v, l, r, I, material, scene):
        # shading at the origin with normal n and view/illum directions v/l
        # r is distance to light, I is intensity
        p = vec([0,0,0])
        ray = Ray(p + 2.0 * v, normalize(-v))  # ray consistent with hit
        hit = Hit(2.0, p, n, material)
        light = PointLight(p + r * normalize(l), I)
        return light.illuminate(ray, hit, scene)

    def test_diffuse(self):
        # light directly overhead, no falloff with distance
        diffuse, _ = self.shading_test(vec([0,1,0]), vec([1,1,0]), vec([0,1,0]), 3, 1.5, IVORY, Scene([]))
        self.assertAlmostEqual(diffuse, 1.5)
        # light at 60 degrees
        diffuse, _ = self.shading_test(vec([0,1,0]), vec([1,1,0]), vec([0,1,np.sqrt(3)]), 1, 1.0, IVORY, Scene([]))
        self.assertAlmostEqual(diffuse, 0.5, places=6)
        # light behind the surface
        diffuse, specular = self.shading_test(vec([0,1,0]), vec([1,1,0]), vec([0,-1,0]), 1, 1.0, IVORY, Scene([]))
        self.assertEqual(diffuse, 0.0)
        self.assertEqual(specular, 0.0)

    def test_specular(self):
        # mirror configuration: the viewer sees the highlight at full strength
        _, specular = self.shading_test(vec([0,1,0]), vec([-1,1,0]), vec([1,1,0]), 1, 2.0, IVORY, Scene([]))
        self.assertAlmostEqual(specular, 2.0, places=4)
        # away from the mirror direction the highlight falls off with the exponent
        _, specular = self.shading_test(vec([0,1,0]), vec([0,1,0]), vec([1,1,0]), 1, 2.0, IVORY, Scene([]))
        self.assertAlmostEqual(specular, 2.0 * np.cos(np.pi/4) ** IVORY.specular_exponent, places=6)

    def test_shadow(self):
        blocker = Sphere(vec([0,5,0]), 1.0, IVORY)
        diffuse, specular = self.shading_test(vec([0,1,0]), vec([-1,1,0]), vec([0,1,0]), 10, 1.0, IVORY, Scene([blocker]))
        self.assertEqual((diffuse, specular), (0.0, 0.0))
        # a sphere beyond the light does not shadow
        diffuse, _ = self.shading_test(vec([0,1,0]), vec([-1,1,0]), vec([0,1,0]), 3, 1.0, IVORY, Scene([blocker]))
        self.assertAlmostEqual(diffuse, 1.0)

    def test_bad_intensity(self):
        with self.assertRaises(ValueError):
            PointLight(vec([0,0,0]), 0.0)


class TestCastRay(unittest.TestCase):

    def test_depth_zero_is_background(self):
        scene = Scene([Sphere(vec([0,0,-5]), 1.0, IVORY)])
        lights = [PointLight(vec([-2,2,0]), 1.5)]
        ray = Ray(vec([0,0,0]), vec([0,0,-1]))
        np.testing.assert_array_equal(cast_ray(ray, scene, lights, 0), BACKGROUND_COLOR)

    def test_miss_is_background(self):
        scene = Scene([Sphere(vec([0,0,-5]), 1.0, IVORY)])
        ray = Ray(vec([0,0,0]), vec([0,0,1]))
        np.testing.assert_array_equal(cast_ray(ray, scene, [], 5), BACKGROUND_COLOR)

    def test_diffuse_only(self):
        scene = Scene([Sphere(vec([0,0,-5]), 1.0, DIFFUSE_WHITE)])
        lights = [PointLight(vec([0,0,0]), 1.5)]
        color = cast_ray(Ray(vec([0,0,0]), vec([0,0,-1])), scene, lights, 5)
        np.testing.assert_allclose(color, [1.5, 1.5, 1.5], rtol=1e-5)

    def test_occluded_light_gives_no_energy(self):
        shiny = Material(albedo=[1, 1, 0, 0], diffuse_color=[0.4, 0.4, 0.3], specular_exponent=10)
        target = Sphere(vec([0,0,-5]), 1.0, shiny)
        lights = [PointLight(vec([4,0,0]), 1.0)]
        ray = Ray(vec([0,0,0]), vec([0,0,-1]))

        lit = cast_ray(ray, Scene([target]), lights, 5)
        self.assertTrue(np.all(lit > 0))

        occluder = Sphere(vec([2,0,-2]), 0.5, IVORY)
        shadowed = cast_ray(ray, Scene([target, occluder]), lights, 5)
        np.testing.assert_array_equal(shadowed, np.zeros(3))

    def test_mirror_sees_background(self):
        mirror = Material(albedo=[0, 0, 1, 0], diffuse_color=[1, 1, 1])
        scene = Scene([Sphere(vec([0,0,-5]), 1.0, mirror)])
        color = cast_ray(Ray(vec([0,0,0]), vec([0,0,-1])), scene, [], 5)
        np.testing.assert_allclose(color, BACKGROUND_COLOR, rtol=1e-6)

    def test_glass_with_index_one_is_invisible(self):
        clear = Material(albedo=[0, 0, 0, 1], diffuse_color=[1, 1, 1], refractive_index=1.0)
        scene = Scene([Sphere(vec([0,0,-5]), 1.0, clear)])
        color = cast_ray(Ray(vec([0,0,0]), normalize(vec([0.1,0.05,-1]))), scene, [], 5)
        np.testing.assert_allclose(color, BACKGROUND_COLOR, rtol=1e-6)

    def test_mirror_reflects_side_sphere(self):
        # mirror tilted 45 degrees at the hit point sends the view ray along +x
        mirror = Material(albedo=[0, 0, 1, 0], diffuse_color=[1, 1, 1])
        red = Material(albedo=[1, 0, 0, 0], diffuse_color=[1, 0, 0])
        cz = -5 + np.sqrt(0.5)
        scene = Scene([
            Sphere(vec([-np.sqrt(0.5), 0, -5]), 1.0, mirror),
            Sphere(vec([5, 0, cz]), 1.0, red),
        ])
        lights = [PointLight(vec([0, 5, cz]), 1.0)]
        color = cast_ray(Ray(vec([0,0,0]), vec([0,0,-1])), scene, lights, 5)
        np.testing.assert_allclose(color, [4 / np.sqrt(41), 0, 0], atol=1e-3)

    def test_glass_bends_toward_hidden_sphere(self):
        # the view ray enters the glass 30 degrees off its normal and leaves
        # deflected about 21 degrees toward -x, where the green sphere sits
        glass = Material(albedo=[0, 0, 0, 1], diffuse_color=[1, 1, 1], refractive_index=1.5)
        green = Material(albedo=[1, 0, 0, 0], diffuse_color=[0, 1, 0])
        target = Sphere(vec([-3.937, 0, -15.321]), 1.0, green)
        scene = Scene([Sphere(vec([-0.5, 0, -5]), 1.0, glass), target])
        lights = [PointLight(vec([0, 0, -10]), 1.0)]
        ray = Ray(vec([0,0,0]), vec([0,0,-1]))

        # the unbent ray misses the target
        self.assertIsNone(target.intersect(ray))

        color = cast_ray(ray, scene, lights, 5)
        np.testing.assert_allclose(color[[0, 2]], [0, 0], atol=1e-6)
        self.assertGreater(color[1], 0.8)

    def test_total_internal_reflection_contributes_nothing(self):
        glass = Material(albedo=[0, 0, 0, 1], diffuse_color=[1, 1, 1], refractive_index=1.5)
        scene = Scene([Sphere(vec([0,0,0]), 1.0, glass)])
        # from inside, hitting the wall at a grazing angle
        color = cast_ray(Ray(vec([0.9,0,0]), vec([0,0,-1])), scene, [], 3)
        self.assertTrue(np.all(np.isfinite(color)))
        np.testing.assert_array_equal(color, np.zeros(3))

    def test_clamp_depth(self):
        self.assertEqual(clamp_depth(5), 5)
        self.assertEqual(clamp_depth(-3), 0)
        self.assertEqual(clamp_depth(10**6), MAX_DEPTH_LIMIT)
        with self.assertRaises(ValueError):
            clamp_depth(float('nan'))
        with self.assertRaises(ValueError):
            clamp_depth(float('inf'))


class TestRender(unittest.TestCase):

    def test_single_sphere(self):
        size = 33
        example = SingleSphereExample(size, size)
        pixels = render_image(example.camera, example.scene, example.lights, size, size, verbose=False)
        self.assertEqual(pixels.shape, (size, size, 3))

        center = pixels[size // 2, size // 2]
        bg = BACKGROUND_COLOR
        self.assertLess(np.linalg.norm(center - IVORY.diffuse_color), np.linalg.norm(center - bg))

        # corner ray misses the sphere
        np.testing.assert_array_equal(pixels[0, 0], bg)
        np.testing.assert_array_equal(color_to_rgb(pixels[0, 0]), [51, 178, 204])

        im = example.render(verbose=False)
        np.testing.assert_array_equal(im.pixels[0, 0], [51, 178, 204])
        np.testing.assert_array_equal(im.pixels[size // 2, size // 2], color_to_rgb(center))


if __name__ == '__main__':
    unittest.main()
