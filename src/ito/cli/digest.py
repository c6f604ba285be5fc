"""CLI command for printing transform argument fingerprints."""

import click
import yaml

from ito.transform.digest import create_args_digest
from ito.transform.types import TransformArgs, normalize_key


def _parse_assignment(assignment: str) -> tuple[str, object]:
    """Split KEY=VALUE, parsing VALUE as a YAML scalar or flow mapping.

    Raises:
        click.BadParameter: If the assignment has no '=' or bad YAML.
    """
    key, sep, raw = assignment.partition("=")
    if not sep or not key.strip():
        raise click.BadParameter(
            f"expected KEY=VALUE, got {assignment!r}", param_hint="ARGS"
        )
    try:
        value = yaml.safe_load(raw) if raw else ""
    except yaml.YAMLError as e:
        raise click.BadParameter(
            f"cannot parse value of {key!r}: {e}", param_hint="ARGS"
        ) from e
    return key.strip(), value


@click.command("digest")
@click.argument("args", nargs=-1, required=True)
def digest_command(args: tuple[str, ...]) -> None:
    """Print the fingerprint of transform arguments.

    ARGS are KEY=VALUE pairs. Values are parsed as YAML, so numbers and
    booleans keep their type. Defaults are filled in as 'ito process'
    does, so the printed value matches the one in its output file names.
    Without a target format the arguments are fingerprinted as given.
    Nested values use flow syntax:

    \b
      ito digest toFormat=png width=500 quality=80
      ito digest to_format=jpg "duotone={highlight: '#f00e2e', shadow: '#192550'}"
    """
    mapping = dict(_parse_assignment(arg) for arg in args)
    if not any(normalize_key(key) == "to_format" for key in mapping):
        click.echo(create_args_digest(mapping))
        return
    try:
        transform_args = TransformArgs.from_mapping(mapping)
    except (ValueError, TypeError) as e:
        raise click.BadParameter(str(e), param_hint="ARGS") from e
    click.echo(create_args_digest(transform_args))
