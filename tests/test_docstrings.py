# Copyright (C) 2025 Richard Owen
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with this program.  If not, see <https://www.gnu.org/licenses/>.
"""Docstring completeness checks for the matchday package.

Beyond parameters and return values, dataclass Parameters blocks must list
exactly the fields, tuning defaults must be stated in the config docs, and any
public callable that raises must say so.
"""

from __future__ import annotations

import dataclasses
import enum
import inspect
import pkgutil
import re
from types import ModuleType
from typing import Iterable, List, Set

import pytest
from numpydoc.docscrape import NumpyDocString

import matchday


def _collect_modules(root: ModuleType) -> List[ModuleType]:
    modules: List[ModuleType] = []
    seen: Set[str] = set()
    stack: List[ModuleType] = [root]

    while stack:
        module = stack.pop()
        name = getattr(module, "__name__", None)
        if name is None or name in seen:
            continue
        seen.add(name)
        modules.append(module)

        module_path = getattr(module, "__path__", None)
        if module_path is None:
            continue

        for finder in pkgutil.walk_packages(module_path, prefix=f"{name}."):
            try:
                submodule = __import__(finder.name, fromlist=["*"])
            except Exception:
                continue
            stack.append(submodule)

    return modules


def _collect_public_callables(modules: Iterable[ModuleType]) -> List[object]:
    items: List[object] = []
    seen: Set[int] = set()

    def add(obj: object) -> None:
        obj_id = id(obj)
        if obj_id not in seen:
            seen.add(obj_id)
            items.append(obj)

    for module in modules:
        include_private = True
        add(module)
        for name, obj in inspect.getmembers(module):
            if name.startswith("__"):
                continue
            if not include_private and name.startswith("_"):
                continue
            if inspect.isfunction(obj) and obj.__module__ == module.__name__:
                add(obj)
            elif inspect.isclass(obj) and obj.__module__ == module.__name__:
                add(obj)
                class_private = include_private
                for meth_name, meth in inspect.getmembers(obj):
                    if meth_name.startswith("__"):
                        continue
                    if not class_private and meth_name.startswith("_"):
                        continue
                    if inspect.isfunction(meth):
                        if meth.__module__ == obj.__module__:
                            add(meth)
                    elif inspect.ismethod(meth):
                        func = meth.__func__
                        if func.__module__ == obj.__module__:
                            add(func)

    return items


def _documented_parameters(docstring: str | None) -> Set[str]:
    if not docstring:
        return set()
    parsed = NumpyDocString(docstring)
    return {name for name, _, _ in parsed["Parameters"]}


def _has_returns_section(docstring: str | None) -> bool:
    if not docstring:
        return False
    parsed = NumpyDocString(docstring)
    return bool(parsed["Returns"])


def _needs_returns_documentation(sig: inspect.Signature) -> bool:
    annotation = sig.return_annotation
    if annotation is inspect.Signature.empty:
        return False
    if annotation in {None, type(None)}:
        return False
    if isinstance(annotation, str):
        normalized = annotation.strip().lower()
        if normalized in {"none", "nonetype", "typing.none", "builtins.none", "builtins.nonetype"}:
            return False
    return True


_MODULES = _collect_modules(matchday)
_PUBLIC_OBJECTS = _collect_public_callables(_MODULES)


def _object_id(obj: object) -> str:
    module = getattr(obj, "__module__", "<unknown>")
    name = getattr(obj, "__qualname__", getattr(obj, "__name__", repr(obj)))
    return f"{module}.{name}"


@pytest.mark.parametrize("obj", _PUBLIC_OBJECTS, ids=_object_id)
def test_parameters_are_documented(obj: object) -> None:
    """Assert that every parameter in the signature is described in the docstring."""
    if inspect.ismodule(obj):
        pytest.skip("Modules are handled separately")
    if inspect.isclass(obj) and issubclass(obj, enum.Enum):
        pytest.skip("Enum members are documented on the class")

    docstring = inspect.getdoc(obj)
    signature = inspect.signature(obj)
    params_to_check = [
        p
        for p in signature.parameters.values()
        if p.kind not in (p.VAR_POSITIONAL, p.VAR_KEYWORD)
        and p.name not in {"self", "cls"}
    ]

    if not params_to_check:
        pytest.skip("No parameters requiring documentation")

    documented = _documented_parameters(docstring)
    missing = [p.name for p in params_to_check if p.name not in documented]

    assert not missing, (
        f"Docstring for {_object_id(obj)} is missing parameter entries: "
        + ", ".join(missing)
    )


@pytest.mark.parametrize("obj", _PUBLIC_OBJECTS, ids=_object_id)
def test_returns_are_documented(obj: object) -> None:
    """Require a Returns section whenever the callable annotates a non-None value."""
    if inspect.ismodule(obj):
        pytest.skip("Modules are handled separately")

    docstring = inspect.getdoc(obj)
    signature = inspect.signature(obj)

    if not _needs_returns_documentation(signature):
        pytest.skip("Return value does not require documentation")

    assert _has_returns_section(docstring), (
        f"Docstring for {_object_id(obj)} is missing a Returns section"
    )

_RAISE_PATTERN = re.compile(r"^\s*raise (\w+)", re.MULTILINE)
_DATACLASSES = [obj for obj in _PUBLIC_OBJECTS if inspect.isclass(obj) and dataclasses.is_dataclass(obj)]


def _raised_exceptions(func: object) -> Set[str]:
    try:
        source = inspect.getsource(func)
    except (OSError, TypeError):
        return set()
    return set(_RAISE_PATTERN.findall(source)) - {"NotImplementedError"}


@pytest.mark.parametrize("module", _MODULES, ids=lambda module: module.__name__)
def test_module_has_summary(module: ModuleType) -> None:
    """Every source module opens with a one-line summary sentence."""
    if getattr(module, "__file__", None) is None:
        pytest.skip("Namespace packages carry no docstring")
    docstring = inspect.getdoc(module)
    assert docstring, f"{module.__name__} has no module docstring"
    assert docstring.splitlines()[0].endswith("."), f"{module.__name__} summary is not a sentence"


@pytest.mark.parametrize("cls", _DATACLASSES, ids=_object_id)
def test_dataclass_fields_match_parameters(cls: type) -> None:
    """Dataclass Parameters blocks list exactly the declared fields."""
    documented = _documented_parameters(inspect.getdoc(cls))
    fields = {f.name for f in dataclasses.fields(cls)}
    assert documented == fields, (
        f"{_object_id(cls)} documents {sorted(documented - fields)} "
        f"but omits {sorted(fields - documented)}"
    )


@pytest.mark.parametrize(
    "cls",
    [cls for cls in _DATACLASSES if cls.__module__ == "matchday.engine.config"],
    ids=_object_id,
)
def test_config_defaults_are_documented(cls: type) -> None:
    """Tuning fields with a plain default state it as ``default=`` in their type line."""
    parsed = NumpyDocString(inspect.getdoc(cls) or "")
    types = {name: type_ for name, type_, _ in parsed["Parameters"]}
    missing = [
        f.name
        for f in dataclasses.fields(cls)
        if f.default is not dataclasses.MISSING and "default=" not in types.get(f.name, "")
    ]
    assert not missing, f"{_object_id(cls)} does not state defaults for: " + ", ".join(missing)


@pytest.mark.parametrize(
    "func",
    [obj for obj in _PUBLIC_OBJECTS if inspect.isfunction(obj) and not obj.__name__.startswith("_")],
    ids=_object_id,
)
def test_raised_errors_are_documented(func: object) -> None:
    """Public callables that raise carry a Raises section."""
    raised = _raised_exceptions(func)
    if not raised:
        pytest.skip("Callable raises nothing itself")
    parsed = NumpyDocString(inspect.getdoc(func) or "")
    assert parsed["Raises"], f"{_object_id(func)} raises {sorted(raised)} without a Raises section"
