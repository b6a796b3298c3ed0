[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "zyraai"
version = "1.0.0"
description = "Neural-network building blocks on NumPy: softmax, convolution and channel batch-norm layers, clipped Adam, learning-rate schedules, parameter serialization and MNIST helpers"
requires-python = ">=3.10"
dependencies = [
    "numpy",
]
keywords = [
    "neural-network",
    "deep-learning",
    "convolution",
    "batch-normalization",
    "adam",
    "mnist",
    "numpy",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Artificial Intelligence",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["zyraai"]

[tool.pytest.ini_options]
addopts = "-ra"
