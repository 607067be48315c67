"""
Salvo decorator chains.

Four independent, ordered registries are filled during plugin installation:
header renderers, usage renderers, validation-error renderers and command runners.
Each one is turned into a single callable by its own composition function.

Renderer decorators  (stack_renderers / stack_error_renderers)
- shape: decorator(base, ctx) -> str  /  decorator(base, ctx, error) -> str
- [d1, d2, d3] around a default B behaves as d1(d2(d3(B))): the first registered
  decorator is the outermost one.
- an empty chain returns the default renderer itself.

Command decorators  (fold_runners)
- shape: decorator(runner) -> runner
- [c1, c2, c3] around R is folded from the right: c3 wraps R, c2 wraps that, c1
  wraps the result, so a call travels c1 → c2 → c3 → R.

Every composed callable is a coroutine function; decorators and bases may be sync
or async. A decorator that raises propagates to the caller.
"""
from .utils import coroutine, rename


async def render_nothing(ctx, /, *args):
    """Default renderer: renders an empty string."""
    return ""


def stack_renderers(decorators, default, /):
    """
    Compose renderer decorators with the first registered as the outermost layer.
    """
    decorators = tuple(decorators)
    if not decorators:
        return default
    renderer = coroutine(default)
    for decorator in reversed(decorators):
        renderer = _layer(decorator, renderer)
    return renderer


def _layer(decorator, base):
    decorator = coroutine(decorator)

    async def renderer(ctx, /):
        return await decorator(base, ctx)

    return rename(renderer, "renderer")


def stack_error_renderers(decorators, default, /):
    """
    Compose validation-error renderer decorators, ordered like stack_renderers().
    """
    decorators = tuple(decorators)
    if not decorators:
        return default
    renderer = coroutine(default)
    for decorator in reversed(decorators):
        renderer = _error_layer(decorator, renderer)
    return renderer


def _error_layer(decorator, base):
    decorator = coroutine(decorator)

    async def renderer(ctx, error, /):
        return await decorator(base, ctx, error)

    return rename(renderer, "error_renderer")


def fold_runners(decorators, runner, /):
    """
    Fold command decorators around `runner` from the right.

    The last registered decorator wraps the runner first; the first registered one
    ends up outermost and sees the call before anybody else.
    """
    runner = coroutine(runner)
    for decorator in reversed(tuple(decorators)):
        wrapped = decorator(runner)
        if not callable(wrapped):
            raise TypeError(f"command decorator {getattr(decorator, '__name__', decorator)!r} must return a callable")
        runner = coroutine(wrapped)
    return runner


class Decorators:
    """
    Ordered decorator registries for one cli invocation.

    Only the installer surface appends to them; composition happens once the
    installation pass is over.
    """

    def __init__(self):
        self.header = []
        self.usage = []
        self.validation_errors = []
        self.command = []

    def add_header_decorator(self, decorator, /):
        self.header.append(_checked(decorator))

    def add_usage_decorator(self, decorator, /):
        self.usage.append(_checked(decorator))

    def add_validation_errors_decorator(self, decorator, /):
        self.validation_errors.append(_checked(decorator))

    def add_command_decorator(self, decorator, /):
        self.command.append(_checked(decorator))

    @property
    def command_decorators(self):
        return tuple(self.command)

    def header_renderer(self):
        return stack_renderers(self.header, render_nothing)

    def usage_renderer(self):
        return stack_renderers(self.usage, render_nothing)

    def validation_errors_renderer(self):
        return stack_error_renderers(self.validation_errors, render_nothing)


def _checked(decorator):
    if not callable(decorator):
        raise TypeError("decorator must be callable")
    return decorator


__all__ = (
    "Decorators",
    "render_nothing",
    "stack_renderers",
    "stack_error_renderers",
    "fold_runners",
)
