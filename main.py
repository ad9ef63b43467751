from rich.pretty import pprint

from argvector import *

parser = Parser(False, descr="build things, argvector style", colorful=True)
parser.add_argument(Argument("bool", "--verbose", "-v", "talk more"))
parser.add_argument(Argument("string", "config", descr="configuration file"))

build = parser.command("build", "build a target")
build.add_argument(Argument("string", "target", descr="what to build"))
build.add_argument(Argument("int", "--jobs", "-j", "parallel jobs", default=1))


if __name__ == '__main__':
    parser.parse()
    pprint(parser)
    pprint({
        "verbose": parser.get("bool", "verbose", default=False),
        "config": parser.get("string", "config"),
        "command": parser.get_active_command_name(),
        "target": parser.get("string", "build", "target"),
        "jobs": parser.get("int", "build", "jobs"),
    })
