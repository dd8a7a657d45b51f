import sys

from rich.console import Console

from ballast import *


def main(argv=None):
    parser = Parser("sort the characters of a string")
    parser.add_positional("string").help("string to sort")
    parser.add_optional("-i", "--invert", arity=Arity.FLAG).help("sort in descending order")
    parser.add_optional("-r", "--repeat", default=1).help("number of times to print the result")
    parser.add_optional("-f", "--filter", arity=Arity.APPEND).help("character to remove, may be repeated")

    try:
        parser.parse(sys.argv if argv is None else argv)

        string = parser.arg("string")
        for character in parser.args("filter", CHAR):
            string = string.replace(character, "")

        string = "".join(sorted(string, reverse=parser.arg("invert", bool)))

        if (repeat := parser.arg("repeat", UINT32)) > 0:
            print(string * repeat)
    except CommandException as fault:
        Console(stderr=True, highlight=False).print(fault)
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())
