[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "qrservice"
version = "0.1.0"
description = "QR Code generator with a minimal HTTP service"
requires-python = ">=3.10"
dependencies = []
keywords = ["qr", "qrcode", "barcode", "reed-solomon", "http"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Multimedia :: Graphics",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
qrservice = "qrservice.service:main"

[tool.hatch.build.targets.wheel]
packages = ["qrservice"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
