"""
Command Line Interface for R2D.
"""
import logging
import click
from ..MODELS.errors import R2DError
from ..PARSERS.environment_parser import EnvironmentParser
from ..BUILDERS.dockerfile_builder import DockerfileBuilder
from ..CONVERTERS.to_dockerfile import DockerfileConverter, render
from ..REGISTRY.catalog import DEFAULT_CATALOG
from ..REGISTRY.resolver import VersionResolver


def _echo_warnings(warnings):
    for warning in warnings:
        click.echo(f"Warning: {warning}", err=True)


@click.group()
@click.option('--verbose', '-v', is_flag=True, help='Enable debug logging')
@click.pass_context
def cli(ctx, verbose):
    """
    R2D - R environment to Dockerfile generator.

    Writes Dockerfiles based on the rocker/r-ver images for a described R environment.
    """
    ctx.ensure_object(dict)
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.ERROR,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@cli.command()
@click.option('--file', '-f', 'env_path', default='r2d.yml', envvar='R2D_FILE', help='Environment description file')
@click.option('--env-file', default=None, help='.env file with variables for interpolation')
@click.option('--out', '-o', default=None, help='Output path; prints to stdout when omitted')
@click.option('--image', default=None, envvar='R2D_IMAGE', help='Base image override, e.g. rocker/r-ver:4.1.0')
@click.option('--r-version', default=None, help='Requested R version, overrides the file')
@click.option('--nearest/--no-nearest', default=True, help='Fall back to the closest available R version')
def generate(env_path, env_file, out, image, r_version, nearest):
    """Generate a Dockerfile from an environment description."""
    try:
        description = EnvironmentParser(env_file=env_file).parse(env_path)
        if r_version:
            if image:
                click.echo("Warning: --r-version is ignored when --image is given", err=True)
            elif description.image:
                click.echo(
                    f"Warning: --r-version {r_version} replaces image {description.image} from {env_path}",
                    err=True,
                )
                description.image = None
            description.r_version = r_version
        if image:
            description.image = image

        result = DockerfileBuilder(nearest=nearest).build(description)
    except R2DError as e:
        raise click.ClickException(str(e))

    _echo_warnings(result.warnings)

    if out:
        try:
            DockerfileConverter(result.dockerfile).convert(out)
        except OSError as e:
            raise click.ClickException(f"Cannot write {out}: {e}")
        click.echo(f"Dockerfile written to {out}", err=True)
    else:
        click.echo(render(result.dockerfile), nl=False)


@cli.command()
@click.argument('version')
@click.option('--nearest/--no-nearest', default=True, help='Fall back to the closest available R version')
def resolve(version, nearest):
    """Show the base image used for an R version."""
    try:
        resolution = VersionResolver().resolve_string(version, nearest=nearest)
    except R2DError as e:
        raise click.ClickException(str(e))

    _echo_warnings(resolution.warnings)
    click.echo(resolution.reference)


@cli.command()
def versions():
    """List R versions with a pre-built base image."""
    click.echo(f"{'VERSION':10} {'IMAGE'}")
    click.echo("-" * 30)
    resolver = VersionResolver()
    for entry in DEFAULT_CATALOG.all():
        click.echo(f"{str(entry.version):10} {resolver.image}:{entry.tag}")


def main():
    """
    Main entry point for the CLI.
    """
    cli(obj={})

if __name__ == '__main__':
    main()
