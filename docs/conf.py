"""Sphinx configuration for the Matchday simulator documentation."""

from __future__ import annotations

import os
import sys
from datetime import datetime
from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as package_version

# Make the namespace package importable for autodoc without an install.
PROJECT_ROOT = os.path.abspath(os.path.join(__file__, "..", ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

project = "Matchday Football Simulator"
author = "Richard Owen"
copyright = f"{datetime.now():%Y}, {author}"

try:
    version = package_version("matchday")
except PackageNotFoundError:
    version = "0.1.0"
release = version

extensions = [
    "sphinx.ext.autodoc",
    "sphinx.ext.autosummary",
    "sphinx.ext.napoleon",
    "sphinx.ext.viewcode",
]

autosummary_generate = True

templates_path = ["_templates"]
exclude_patterns: list[str] = ["_build", "Thumbs.db", ".DS_Store"]

html_theme = "sphinx_rtd_theme"

# Signatures stay short; types are rendered in the parameter lists.
autodoc_typehints = "description"
napoleon_google_docstring = False
napoleon_numpy_docstring = True
