"""
Salvo built-in plugins.

- globals  (id "g:globals")
  • registers the COMMON_ARGS global options (--help/-h, --version/-v);
  • extension: GlobalsExtension (show_version, show_header, show_usage,
    show_validation_errors);
  • command decorator: --version prints the version, the header is rendered,
    --help prints the usage, validation errors are reported; otherwise the command runs.

- renderer (id "g:renderer")
  • decorates the header, usage and validation-error renderers with salvo.renderer.

salvo.cli() installs both, globals first, before any user plugin.
"""
from .arguments import COMMON_ARGS
from .plugins import Plugin
from .renderer import render_header, render_usage, render_validation_errors

GLOBALS_ID = "g:globals"
RENDERER_ID = "g:renderer"


class GlobalsExtension:
    """
    ctx.extensions["g:globals"]: output helpers bound to the command context.
    """

    def __init__(self, ctx, /):
        self._ctx = ctx

    def show_version(self):
        """
        Print (unless usage_silent) and return the cli version, "unknown" when unset.
        """
        version = self._ctx.env.version or "unknown"
        if not self._ctx.env.usage_silent:
            self._ctx.log(version)
        return version

    async def show_header(self):
        renderer = self._ctx.env.render_header
        if renderer is None:
            return None
        header = await renderer(self._ctx)
        if header:
            self._ctx.log(header)
            self._ctx.log()
        return header

    async def show_usage(self):
        renderer = self._ctx.env.render_usage
        if renderer is None:
            return None
        usage = await renderer(self._ctx)
        if usage:
            self._ctx.log(usage)
            return usage
        return None

    async def show_validation_errors(self, error, /):
        renderer = self._ctx.env.render_validation_errors
        if renderer is None:
            return None
        rendered = await renderer(self._ctx, error)
        if rendered:
            self._ctx.log(rendered)
        return rendered


def _globals_extension(ctx, command, /):
    return GlobalsExtension(ctx)


def _globals_decorator(runner, /):
    async def globals_runner(ctx, /):
        extension = ctx.extensions[GLOBALS_ID]
        if ctx.values.get("version"):
            return extension.show_version()

        buffer = []
        if header := await extension.show_header():
            buffer.append(header)

        if ctx.values.get("help"):
            if usage := await extension.show_usage():
                buffer.append(usage)
                return "\n".join(buffer)
            return None

        if ctx.validation_error is not None:
            return await extension.show_validation_errors(ctx.validation_error)

        return await runner(ctx)

    return globals_runner


def _setup_globals(ctx, /):
    for name, schema in COMMON_ARGS.items():
        ctx.add_global_option(name, schema)
    ctx.decorate_command(_globals_decorator)


def _setup_renderer(ctx, /):
    ctx.decorate_header_renderer(lambda base, ctx: render_header(ctx))
    ctx.decorate_usage_renderer(lambda base, ctx: render_usage(ctx))
    ctx.decorate_validation_errors_renderer(lambda base, ctx, error: render_validation_errors(ctx, error))


def globals_plugin():
    return Plugin(GLOBALS_ID, name="globals", setup=_setup_globals, extension=_globals_extension)


def renderer_plugin():
    return Plugin(RENDERER_ID, name="renderer", setup=_setup_renderer)


def builtin_plugins():
    """Return fresh descriptors of the built-in plugins, in installation order."""
    return [globals_plugin(), renderer_plugin()]


__all__ = (
    "GLOBALS_ID",
    "RENDERER_ID",
    "GlobalsExtension",
    "globals_plugin",
    "renderer_plugin",
    "builtin_plugins",
)
