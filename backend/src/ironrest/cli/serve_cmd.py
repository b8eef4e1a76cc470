"""serve command: run the API under uvicorn."""

import os
from pathlib import Path

import click


@click.command()
@click.option("--host", default="127.0.0.1", show_default=True)
@click.option("--port", default=lambda: int(os.environ.get("IRONREST_PORT", "8000")), type=int)
@click.option(
    "--bindings",
    "bindings_path",
    default=None,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Bindings YAML to attach on startup (overrides IRONREST_BINDINGS).",
)
@click.option(
    "--hooks",
    "hook_modules",
    default=None,
    help="Comma-separated modules registering hooks (overrides IRONREST_HOOK_MODULES).",
)
@click.option("--reload", is_flag=True, default=False, help="Reload on code changes.")
@click.option(
    "--log-level",
    default=lambda: os.environ.get("IRONREST_LOG_LEVEL", "info"),
    type=click.Choice(["critical", "error", "warning", "info", "debug"]),
)
def serve(
    host: str,
    port: int,
    bindings_path: Path | None,
    hook_modules: str | None,
    reload: bool,
    log_level: str,
):
    """Serve the attached collections over HTTP."""
    import uvicorn

    # The app reads these at startup, also in uvicorn's reload worker
    if bindings_path is not None:
        os.environ["IRONREST_BINDINGS"] = str(bindings_path.resolve())
    if hook_modules is not None:
        os.environ["IRONREST_HOOK_MODULES"] = hook_modules

    click.echo(f"Serving IronREST on http://{host}:{port}")
    uvicorn.run(
        "ironrest.api.app:app",
        host=host,
        port=port,
        reload=reload,
        log_level=log_level,
    )
