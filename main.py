from rich.pretty import pprint

from salvo import *


@command(args={"file": Arg("positional", descr="File to inspect"), "debug": Arg("boolean", short="d")})
def inspect(ctx):
    """Show the resolved context."""
    pprint(dict(ctx.values))


@lazy(descr="Print the plugin extensions")
def extensions():
    return lambda ctx: pprint(dict(ctx.extensions))


if __name__ == '__main__':
    run(inspect, options={"name": "salvo-demo", "version": __version__, "sub_commands": {"extensions": extensions}})
