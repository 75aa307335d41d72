import time

import numpy as np

import pyfastsample as ps

ps.init("cpu")

nx, ny = 1024, 768

# Smooth pattern plus noise, 3 channels
x = np.linspace(0, 8 * np.pi, nx, dtype=np.float32)
y = np.linspace(0, 6 * np.pi, ny, dtype=np.float32)
X, Y = np.meshgrid(x, y)
rng = np.random.default_rng(0)
rgb = np.stack([np.sin(X), np.cos(Y), np.sin(X + Y)], axis=2) * 0.5 + 0.5
rgb += rng.normal(scale=0.05, size=rgb.shape)
img = ps.LinearImage.from_numpy(rgb.astype(np.float32))

for kind in ["box", "gaussian", "hermite", "mitchell", "lanczos", "min"]:
    st = time.time()
    small = ps.resample_image(img, nx // 4, ny // 4, kind)
    print(kind, small, f"{time.time() - st:.3f} s")

# Zoom on the centre
smp = ps.ImageSampler.uniform("mitchell", source_region=ps.Region(0.4, 0.4, 0.6, 0.6))
zoom = ps.resample_image(img, 512, 512, smp, verbose=True)

# Point queries reusing one program
program = ps.sampler.MadProgram()
for px, py in [(0.1, 0.1), (0.5, 0.5), (0.9, 0.25)]:
    print(px, py, ps.sample_at(img, px, py, "lanczos", program=program))
program.release()

print(ps.pool.taipool.stats())
ps.image.save_image(zoom, "zoom.png")
