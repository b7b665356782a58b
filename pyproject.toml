[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "uptimebot"
version = "0.1.0"
description = "Uptime monitoring of HTTP targets with SQLite storage, Slack notifications, and CSRF and flash-message middleware for WSGI apps."
requires-python = ">=3.10"
keywords = ["uptime", "monitoring", "http", "slack", "notifications", "wsgi", "csrf", "sqlite"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Monitoring",
    "Topic :: Internet :: WWW/HTTP :: WSGI :: Middleware",
]
dependencies = [
    "werkzeug",
    "requests",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["uptimebot"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
