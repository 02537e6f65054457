from rich.pretty import pprint

from declopt import *

MARKS = {"bang": "!", "dot": ".", "ask": "?"}


def mark(raw):
    if raw not in MARKS:
        raise ValueError("choose one of: %s" % ", ".join(MARKS))
    return MARKS[raw]


parser = Parser(
    integer("count", "--count=", "-c", descr="how many greetings to print", default=1, bits=8, signed=False),
    switch("verbose", "-v", "--verbose", descr="print the parsed values"),
    text("name", "--name=", descr="who to greet", required=True),
    section("Style:"),
    switch("shout", "--shout", const=str.upper, descr="greet in capitals"),
    manual("punctuation", "--end=", convert=mark, default="!", descr="closing mark: bang, dot or ask"),
    decimal("delay", "--delay=", descr="pause between greetings, in seconds", check=lambda value: value >= 0),
    prog="greeter",
    shell=True,
)


if __name__ == '__main__':
    if "--help" in __import__("sys").argv:
        parser.print_help()
        raise SystemExit(0)
    parser.parse()
    parser.validate()
    if parser["verbose"]:
        pprint(parser.options)
        pprint(parser.values())
    style = parser["shout"] or str
    for _ in range(parser["count"]):
        print(style(f"Hello, {parser["name"]}{parser["punctuation"]}"))
