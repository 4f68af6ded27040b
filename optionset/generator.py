"""Generates :class:`~optionset.optionset.OptionSet` subclasses from declarative specifications.

A specification lists the names of the options in bit order, plus optional compound options and "none"/"all"
conveniences. It can be turned into Python source text with :func:`render_option_set` / :func:`render_module`, or into
a class at runtime with :func:`build_option_set`::

    spec = OptionSetSpec(
        source_name="_ShippingOptions",
        options=("nextDay", "secondDay", "priority", "standard"),
        compound={"express": ("nextDay", "secondDay")},
    )
    ShippingOptions = build_option_set(spec)
    print(ShippingOptions.express)  # ShippingOptions (0011): nextDay, secondDay

Specifications can also be read from JSON files with :func:`load_specs`::

    [
        {"enum": "Color", "options": ["red", "blue", "green"]},
        {
            "enum": "_ShippingOptions",
            "options": ["nextDay", "secondDay", "priority", "standard"],
            "compound": {"express": ["nextDay", "secondDay"]}
        }
    ]

"""

import json
import keyword
import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Sequence, Tuple, Type, Union

from .optionset import Compound, MAX_OPTIONS, Option, OptionSet, OptionSetMeta

log = logging.getLogger("optionset")

SPEC_KEYS = frozenset(("enum", "source_name", "options", "name", "compound", "none", "all", "strict"))
RESERVED_CLASS_NAMES = frozenset(("Compound", "Option", "OptionSet"))

Marker = Union[Option, Compound]


class OptionSetSpecError(ValueError):
    """Raised when an option set specification is malformed."""


@dataclass(frozen=True)
class OptionSetSpec:
    """A declarative description of an option set type."""

    source_name: str
    """Name of the enumeration this specification was derived from."""
    options: Tuple[str, ...]
    """Option names, in bit order."""
    name: str = ""
    """Overrides the generated class name if not empty."""
    compound: Mapping[str, Tuple[str, ...]] = field(default_factory=dict)
    """Maps the name of each compound option to the names of the options it combines."""
    none: bool = True
    """Whether to emit a ``none`` constant with no options on."""
    all: bool = True
    """Whether to emit an ``all`` constant with every option on."""
    strict: bool = False
    """Whether the generated class masks raw values to the width of its catalog."""

    def __post_init__(self):
        object.__setattr__(self, "options", tuple(self.options))
        object.__setattr__(self, "compound", {key: tuple(value) for key, value in self.compound.items()})

    def __hash__(self):
        return hash(
            (self.source_name, self.options, self.name, tuple(self.compound.items()), self.none, self.all, self.strict)
        )

    @property
    def class_name(self) -> str:
        if self.name:
            return self.name
        elif self.source_name.startswith("_"):
            return self.source_name[1:]
        else:
            return f"{self.source_name}Options"

    @staticmethod
    def _check_identifier(kind: str, identifier: Any):
        if not isinstance(identifier, str) or not identifier.isidentifier() or keyword.iskeyword(identifier):
            raise OptionSetSpecError(f"Invalid {kind} name {identifier!r}: it must be a Python identifier")

    def validate(self):
        """Raises :exc:`OptionSetSpecError` if this specification cannot be turned into an option set."""
        self._check_identifier("class", self.class_name)
        if self.class_name in RESERVED_CLASS_NAMES:
            raise OptionSetSpecError(
                f"Cannot generate a class named {self.class_name}; the name is imported by generated modules"
            )
        if not self.options:
            raise OptionSetSpecError(f"{self.class_name} does not declare any options")
        if len(self.options) > MAX_OPTIONS:
            raise OptionSetSpecError(
                f"{self.class_name} declares {len(self.options)} options; at most {MAX_OPTIONS} are supported"
            )
        seen = set()
        for member_name, _ in self.markers():
            self._check_identifier("option", member_name)
            if member_name in seen:
                raise OptionSetSpecError(f"{self.class_name} declares {member_name!r} more than once")
            if hasattr(OptionSet, member_name):
                raise OptionSetSpecError(
                    f"Option {member_name!r} of {self.class_name} shadows an existing OptionSet attribute"
                )
            seen.add(member_name)
        for compound_name, members in self.compound.items():
            if not members:
                raise OptionSetSpecError(f"Compound option {compound_name!r} of {self.class_name} is empty")
            if len(set(members)) != len(members):
                raise OptionSetSpecError(
                    f"Compound option {compound_name!r} of {self.class_name} lists an option more than once"
                )
            for member in members:
                if member not in self.options:
                    raise OptionSetSpecError(
                        f"Compound option {compound_name!r} of {self.class_name} refers to unknown option {member!r}"
                    )

    def markers(self) -> List[Tuple[str, Marker]]:
        """Returns the class members of the generated type, in the order they are emitted."""
        markers: List[Tuple[str, Marker]] = []
        if self.none:
            markers.append(("none", Compound()))
        markers.extend((option, Option()) for option in self.options)
        markers.extend((compound_name, Compound(*members)) for compound_name, members in self.compound.items())
        if self.all:
            markers.append(("all", Compound(*self.options)))
        return markers

    @classmethod
    def from_dict(cls, spec: Mapping[str, Any]) -> "OptionSetSpec":
        if not isinstance(spec, Mapping):
            raise OptionSetSpecError(f"Expected an option set specification object, but found {spec!r}")
        unknown = set(spec.keys()) - SPEC_KEYS
        if unknown:
            raise OptionSetSpecError(f"Unknown option set specification keys: {', '.join(sorted(unknown))}")
        source_name = spec.get("enum", spec.get("source_name", ""))
        options = spec.get("options", ())
        compound = spec.get("compound", {})
        if not isinstance(source_name, str) or not isinstance(spec.get("name", ""), str):
            raise OptionSetSpecError("`enum` and `name` must be strings")
        if isinstance(options, str) or not isinstance(options, Sequence):
            raise OptionSetSpecError(f"The options of {source_name!r} must be a list of names")
        if not isinstance(compound, Mapping) or not all(
            isinstance(members, Sequence) and not isinstance(members, str) for members in compound.values()
        ):
            raise OptionSetSpecError(f"The compound options of {source_name!r} must map names to lists of options")
        for key in ("none", "all", "strict"):
            if not isinstance(spec.get(key, False), bool):
                raise OptionSetSpecError(f"{key!r} must be a boolean, not {spec[key]!r}")
        if not source_name and not spec.get("name", ""):
            raise OptionSetSpecError("An option set specification needs an `enum` or a `name`")
        return cls(
            source_name=source_name,
            options=tuple(options),
            name=spec.get("name", ""),
            compound=compound,
            none=spec.get("none", True),
            all=spec.get("all", True),
            strict=spec.get("strict", False),
        )

    @classmethod
    def from_enum(cls, enum_type: Type[Enum], **kwargs) -> "OptionSetSpec":
        """Creates a specification whose options are the members of ``enum_type``, in definition order."""
        return cls(source_name=enum_type.__name__, options=tuple(member.name for member in enum_type), **kwargs)


def _log_spec(spec: OptionSetSpec):
    log.info(f"{spec.class_name}: options {', '.join(spec.options)}")
    for compound_name, members in spec.compound.items():
        log.info(f"{spec.class_name}.{compound_name} = {' & '.join(members)}")
    log.info(f"{spec.class_name}: none={spec.none}, all={spec.all}, strict={spec.strict}")


def build_option_set(spec: OptionSetSpec) -> Type[OptionSet]:
    """Creates the option set type described by ``spec`` at runtime."""
    spec.validate()
    _log_spec(spec)
    namespace: Dict[str, Any] = {"__module__": __name__, "__qualname__": spec.class_name}
    if spec.strict:
        namespace["strict"] = True
    namespace.update(spec.markers())
    return OptionSetMeta(spec.class_name, (OptionSet,), namespace)


def _marker_source(marker: Marker) -> str:
    if isinstance(marker, Option):
        return "Option()"
    return f"Compound({', '.join(json.dumps(member) for member in marker.members)})"


def _class_source(spec: OptionSetSpec) -> str:
    ans = [f"class {spec.class_name}(OptionSet):"]
    a = ans.append
    if spec.strict:
        a("    strict = True")
        a("")
    for member_name, marker in spec.markers():
        a(f"    {member_name} = {_marker_source(marker)}")
    return "\n".join(ans) + "\n"


def format_source(source: str) -> str:
    """Normalizes generated source with black."""
    import black

    return black.format_str(source, mode=black.Mode())


def render_option_set(spec: OptionSetSpec, format_code: bool = True) -> str:
    """Returns the source of a class declaring the option set type described by ``spec``.

    The class depends on :class:`~optionset.optionset.OptionSet`, :class:`~optionset.optionset.Option` and
    :class:`~optionset.optionset.Compound` being in scope; use :func:`render_module` for a complete module.

    """
    spec.validate()
    _log_spec(spec)
    source = _class_source(spec)
    if format_code:
        source = format_source(source)
    return source


def render_module(specs: Iterable[OptionSetSpec], format_code: bool = True) -> str:
    """Returns the source of a Python module declaring every option set type in ``specs``."""
    specs = list(specs)
    if not specs:
        raise OptionSetSpecError("No option set specifications to generate")
    class_names = set()
    for spec in specs:
        spec.validate()
        if spec.class_name in class_names:
            raise OptionSetSpecError(f"More than one option set specification generates {spec.class_name}")
        class_names.add(spec.class_name)
    imports = ["Option", "OptionSet"]
    if any(isinstance(marker, Compound) for spec in specs for _, marker in spec.markers()):
        imports.insert(0, "Compound")
    header = "\n".join(
        [
            "# Generated by optionset. Do not edit by hand.",
            "",
            f"from optionset import {', '.join(imports)}",
            "",
            "",
            "",
        ]
    )
    classes = []
    for spec in specs:
        _log_spec(spec)
        classes.append(_class_source(spec))
    source = header + "\n\n".join(classes)
    if format_code:
        source = format_source(source)
    return source


def load_specs(path: Union[str, Path]) -> List[OptionSetSpec]:
    """Reads one option set specification, or a list of them, from the JSON file at ``path``."""
    try:
        with open(path, "r") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise OptionSetSpecError(f"{path} is not valid JSON: {e!s}") from e
    except OSError as e:
        raise OptionSetSpecError(f"Cannot read {path}: {e!s}") from e
    if isinstance(data, Mapping):
        data = [data]
    elif not isinstance(data, list):
        raise OptionSetSpecError(f"{path} must contain an option set specification or a list of them")
    specs = [OptionSetSpec.from_dict(spec) for spec in data]
    log.debug(f"Loaded {len(specs)} option set specification(s) from {path}")
    return specs
