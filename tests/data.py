import sys
from typing import List

from optionset import Compound, Option, OptionSet
from optionset.__main__ import main


class ImageFormat(OptionSet):
    png = Option()
    jpeg = Option()
    svg = Option()
    gif = Option()

    rasters = Compound("png", "jpeg")


class Pair(OptionSet):
    left = Option()
    right = Option()


class Color(OptionSet):
    option_names = ("red", "green", "blue", "alpha")


Color.red = Color(1 << 0)
Color.green = Color(1 << 1)
Color.blue = Color(1 << 2)
Color.alpha = Color(1 << 3)


SHIPPING_SPEC = {
    "enum": "_ShippingOptions",
    "options": ["nextDay", "secondDay", "priority", "standard"],
    "compound": {"express": ["nextDay", "secondDay"]},
}


def run_optionset(cmd: List[str]) -> int:
    tmp = sys.argv
    setattr(sys, "argv", [sys.argv[0], *cmd])
    try:
        return main()
    finally:
        setattr(sys, "argv", tmp)
