import typer

from stationmap.version import get_version


def register_standalone_commands(app: typer.Typer):
    @app.command("version")
    def version_cmd():
        """Show version information"""
        typer.echo(f"stationmap version: {get_version()}")
