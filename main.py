from rich.pretty import pprint

from argspan import *

__prog__ = "argspan-demo"

parser = Parser(shell=True, fancy=True)
parser.switch("A", "a-switch", nargs="+", duplicates=True, descr="values, repeatable")
parser.switch("B", nargs=1, choices=("a", "b"), descr="one of a or b")
parser.switch("v", "verbose", excludes=("quiet",))
parser.switch("q", "quiet")
parser.positional("X")


if __name__ == '__main__':
    pprint(parser)
    pprint(parser.parse())
