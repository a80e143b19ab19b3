[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "roulette-server"
version = "0.1.0"
description = "A small WebSocket game server that answers login packets sent in binary frames"
requires-python = ">=3.10"
dependencies = []
keywords = ["websocket", "game server", "roulette", "tcp", "select"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Games/Entertainment",
    "Topic :: Internet :: WWW/HTTP",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
roulette-server = "roulette_server.app:main"

[tool.hatch.build.targets.wheel]
packages = ["roulette_server"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
