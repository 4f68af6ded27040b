import keyword
from abc import ABCMeta
from typing import cast, Dict, Optional, Tuple, Type, TypeVar

MAX_OPTIONS = 64
"""The largest number of options a single catalog may declare."""
WORD_BITS = 64
"""Width used to render negative raw values as two's complement."""
WORD_MASK = (1 << WORD_BITS) - 1

CATALOGS: Dict[Type["OptionSet"], Tuple[str, ...]] = {}
"""A global dictionary mapping concrete option set types to their option names."""


class Option:
    """Declares a single option inside an :class:`OptionSet` subclass body.

    Options are assigned bits in declaration order, starting at bit 0. ``name`` overrides the name shown by
    :meth:`OptionSet.describe`; by default the attribute name is used. Display names may be any string, since they
    never become attributes.

    """

    def __init__(self, name: Optional[str] = None):
        self.name: Optional[str] = name


class Compound:
    """Declares a named constant equal to the union of other options in the same class body.

    ``Compound()`` with no members declares the empty ("none") value.

    """

    def __init__(self, *members: str):
        self.members: Tuple[str, ...] = members


class OptionSetMeta(ABCMeta):
    """Metaclass for option sets.

    Replaces :class:`Option` and :class:`Compound` markers with instances of the class being created and records the
    class's catalog in :data:`CATALOGS`.

    """

    def __init__(cls, name, bases, clsdict):
        super().__init__(name, bases, clsdict)
        if not any(isinstance(base, OptionSetMeta) for base in bases):
            return
        options = [(attr, value) for attr, value in clsdict.items() if isinstance(value, Option)]
        compounds = [(attr, value) for attr, value in clsdict.items() if isinstance(value, Compound)]
        declared = "option_names" in clsdict
        inherited = next((base for base in cls.__mro__[1:] if base in CATALOGS), None)
        if not (options or compounds or declared):
            if inherited is not None:
                CATALOGS[cls] = CATALOGS[inherited]
                for attr, value in inherited.members().items():
                    if attr not in clsdict:
                        setattr(cls, attr, cls(value.raw_value))
            return
        if inherited is not None:
            raise TypeError(f"{name} cannot extend the option catalog of {inherited.__name__}")
        if options and declared:
            raise TypeError(f"{name} declares both Option() members and an explicit option_names")
        for attr, _ in options + compounds:
            if any(hasattr(base, attr) for base in bases):
                raise TypeError(f"Option {attr!r} of {name} shadows an existing OptionSet attribute")

        bits: Dict[str, int] = {}
        if declared:
            names = clsdict["option_names"]
            if isinstance(names, str) or not all(isinstance(n, str) for n in names):
                raise TypeError(f"{name}.option_names must be a sequence of strings")
            names = tuple(names)
            for option_name in names:
                if not option_name.isidentifier() or keyword.iskeyword(option_name):
                    raise TypeError(f"Option {option_name!r} of {name} is not a valid Python identifier")
                if any(hasattr(base, option_name) for base in bases):
                    raise TypeError(f"Option {option_name!r} of {name} shadows an existing OptionSet attribute")
            for i, option_name in enumerate(names):
                bits[option_name] = 1 << i
        else:
            names = tuple(option.name or attr for attr, option in options)
            for i, (attr, _) in enumerate(options):
                bits[attr] = 1 << i
        if len(names) > MAX_OPTIONS:
            raise TypeError(f"{name} declares {len(names)} options; at most {MAX_OPTIONS} are supported")
        if len(set(names)) != len(names):
            raise TypeError(f"{name} declares duplicate option names: {names!r}")

        cls.option_names = names
        CATALOGS[cls] = names

        for attr, value in clsdict.items():
            if isinstance(value, Option):
                setattr(cls, attr, cls(bits[attr]))
            elif isinstance(value, Compound):
                raw_value = 0
                for member in value.members:
                    if member not in bits:
                        raise TypeError(f"Compound {attr!r} of {name} refers to unknown option {member!r}")
                    raw_value |= bits[member]
                setattr(cls, attr, cls(raw_value))


B = TypeVar("B", bound="OptionSet")


class OptionSet(metaclass=OptionSetMeta):
    """An immutable wrapper around an integer bitmask, i.e., a set of named options.

    Subclasses declare their options with markers::

        class ImageFormat(OptionSet):
            png = Option()
            jpeg = Option()
            svg = Option()
            gif = Option()

            rasters = Compound("png", "jpeg")

    or by listing ``option_names`` and assigning constants after the class body::

        class ImageFormat(OptionSet):
            option_names = ("png", "jpeg", "svg", "gif")

        ImageFormat.png = ImageFormat(1 << 0)

    Every operation returns a value of the same concrete type as its operands. Values of different option set types
    never compare equal, even if their raw values do.

    Setting ``strict = True`` on a subclass masks every raw value to the width of its catalog, so that complements
    never carry bits outside of the declared options.

    """

    __slots__ = ("_raw_value",)

    strict: bool = False

    def __init__(self, raw_value: int = 0):
        if not isinstance(raw_value, int) or isinstance(raw_value, bool):
            raise TypeError(f"{self.__class__.__name__} raw values must be integers, not {raw_value!r}")
        if self.strict:
            catalog = CATALOGS.get(type(self))
            if catalog is not None:
                raw_value &= (1 << len(catalog)) - 1
        object.__setattr__(self, "_raw_value", raw_value)

    @property
    def raw_value(self) -> int:
        """The underlying mask."""
        return self._raw_value

    @property
    def option_names(self) -> Tuple[str, ...]:
        """Names of every option in this set's catalog, indexed by bit position."""
        return self.__class__.catalog()

    @classmethod
    def catalog(cls) -> Tuple[str, ...]:
        if cls not in CATALOGS:
            raise NotImplementedError(
                f"{cls.__name__} does not declare any options; declare Option() members or option_names"
            )
        return CATALOGS[cls]

    @classmethod
    def from_raw_value(cls: Type[B], raw_value: int) -> B:
        """Creates a new option set of this type with the underlying mask ``raw_value``."""
        if cls not in CATALOGS:
            raise NotImplementedError(
                f"{cls.__name__} cannot be rebuilt from a raw value because it does not declare any options; "
                "declare Option() members or option_names, or override init_with_raw_value"
            )
        return cls(raw_value)

    def init_with_raw_value(self: B, raw_value: int) -> B:
        """Creates a new option set of the same concrete type as this one.

        All operations build their results through this method, so a subclass that constructs its values differently
        only needs to override it.

        """
        return self.__class__.from_raw_value(raw_value)

    @classmethod
    def members(cls: Type[B]) -> Dict[str, B]:
        """Returns every named constant of this type, single options and compounds alike, in declaration order."""
        members: Dict[str, B] = {}
        for klass in reversed(cls.__mro__):
            for attr, value in vars(klass).items():
                if type(value) is cls:
                    members[attr] = cast(B, value)
        return members

    @classmethod
    def get(cls: Type[B], name: str) -> Optional[B]:
        return cls.members().get(name, None)

    def names(self) -> Tuple[str, ...]:
        """Returns the names of the options that are on, in catalog order."""
        return tuple(
            option_name for i, option_name in enumerate(self.option_names) if self._raw_value & (1 << i) != 0
        )

    def masked(self: B) -> B:
        """Returns a copy of this option set without any bits beyond its catalog."""
        return self.init_with_raw_value(self._raw_value & ((1 << len(self.option_names)) - 1))

    def _check_operand(self, other: "OptionSet", operation: str):
        if type(other) is not type(self):
            raise TypeError(
                f"Cannot {operation} {self.__class__.__name__} with {other.__class__.__name__}; "
                "both operands must be of the same option set type"
            )

    # OPERATIONS

    def combine(self: B, other: B) -> B:
        """Returns an option set with the options of both operands on (i.e., the bitwise OR of their masks)."""
        self._check_operand(other, "combine")
        return self.init_with_raw_value(self._raw_value | other._raw_value)

    def complement(self: B) -> B:
        """Inverts every bit of the underlying mask, including bits beyond the catalog."""
        return self.init_with_raw_value(~self._raw_value)

    def has(self, options: "OptionSet") -> bool:
        """Queries for ``options``.

        If ``options`` is a combination of options, returns ``True`` only if *all* of them are on.

        """
        self._check_operand(options, "query")
        return (self._raw_value & options._raw_value) == options._raw_value

    def toggle(self: B, options: B) -> B:
        """Flips every option in ``options``."""
        self._check_operand(options, "toggle")
        return self.init_with_raw_value(self._raw_value ^ options._raw_value)

    def turn_on(self: B, options: B) -> B:
        return self.combine(options)

    def turn_off(self: B, options: B) -> B:
        """Turns off every option in ``options``, regardless of whether it was on."""
        self._check_operand(options, "turn off")
        return self.init_with_raw_value(self._raw_value & ~options._raw_value)

    def __and__(self: B, other: B) -> B:
        if type(other) is not type(self):
            return NotImplemented
        return self.combine(other)

    __or__ = __and__

    def __xor__(self: B, other: B) -> B:
        if type(other) is not type(self):
            return NotImplemented
        return self.toggle(other)

    def __invert__(self: B) -> B:
        return self.complement()

    def __contains__(self, options: "OptionSet") -> bool:
        return self.has(options)

    # EQUALITY

    def __eq__(self, other):
        # Equal masks of different option set types are different values
        return type(self) is type(other) and self._raw_value == other._raw_value

    def __hash__(self):
        return hash((type(self), self._raw_value))

    def __bool__(self):
        return self._raw_value != 0

    def __int__(self):
        return self._raw_value

    __index__ = __int__

    def __setattr__(self, key, value):
        raise AttributeError(f"{self.__class__.__name__} is immutable")

    def __delattr__(self, item):
        raise AttributeError(f"{self.__class__.__name__} is immutable")

    def __reduce__(self):
        return self.__class__, (self._raw_value,)

    # STRING

    def describe(self) -> str:
        """Returns a human-readable representation of this option set.

        The representation includes the name of the type, the mask in binary with exactly one digit per option, and
        the names of the options that are on::

            >>> print(ImageFormat.png & ImageFormat.gif)
            ImageFormat (1001): png, gif

        Negative masks are rendered as their two's complement in :data:`WORD_BITS` bits before being cut down to the
        catalog width.

        """
        option_names = self.option_names
        width = len(option_names)
        raw_value = self._raw_value
        if raw_value < 0:
            raw_value &= WORD_MASK
        binary = format(raw_value, "b").rjust(width, "0")
        if len(binary) > width:
            binary = binary[len(binary) - width:]
        return f"{self.__class__.__name__} ({binary}): {', '.join(self.names())}"

    def __str__(self):
        return self.describe()

    def __repr__(self):
        return f"{self.__class__.__name__}(raw_value={self._raw_value!r})"
