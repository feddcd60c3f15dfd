import typer

from stationmap.cli.commands.run import register_run_command
from stationmap.cli.commands.standalone import register_standalone_commands
from stationmap.cli.commands.summary import register_summary_command
from stationmap.configs.logging_init import initialize_loggers

app = typer.Typer()

# Register standalone commands (version)
register_standalone_commands(app)

register_run_command(app)
register_summary_command(app)


@app.callback()
def verbose_callback(
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable verbose logging", is_eager=True
    ),
    verbose_level=typer.Option(
        "INFO",
        "--verbose-level",
        "-vl",
        help="Set verbose logging level",
        is_eager=True,
    ),
):
    """Set up logging for all commands"""
    initialize_loggers(verbose, verbose_level)


def main():
    app()


if __name__ == "__main__":
    main()
