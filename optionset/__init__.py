"""Typed bitmasks ("option sets") and a generator for declaring them.

:class:`OptionSet` is the base class for every option set type; :mod:`optionset.generator` creates subclasses from
declarative specifications, either as source code or at runtime.

"""

__version__ = "1.0.0"

from .optionset import CATALOGS, Compound, MAX_OPTIONS, Option, OptionSet, OptionSetMeta, WORD_BITS
from .generator import (
    build_option_set,
    load_specs,
    OptionSetSpec,
    OptionSetSpecError,
    render_module,
    render_option_set,
)
