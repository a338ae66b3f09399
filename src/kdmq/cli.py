import logging
import sys
from pathlib import Path

import click
import yaml
from pydantic import ValidationError

from kdmq.errors import KDMQError
from kdmq.models.kdm import VALID_PRODUCTS
from kdmq.services.diff import diff_one_way, diff_symmetric, unique
from kdmq.services.kdm_client import KDMClient
from kdmq.services.query import (
    images_for_release,
    latest_per_minor,
    list_k8s_versions,
    require_images_for_k8s_version,
)
from kdmq.services.render import addon_diff_rows, addon_rows, join_lines, render_table, section
from kdmq.services.resolver import fetch_channel_data, resolve
from kdmq.services.settings_loader import load_settings

VERSION = "0.1.0"


class AliasedGroup(click.Group):
    _aliases = {
        "lk": "listk8s",
        "dk": "diffk8s",
        "daki": "diffallk8simages",
        "lki": "listk8simages",
        "dki": "diffk8simages",
        "lka": "listk8saddons",
        "dka": "diffk8saddons",
    }

    def get_command(self, ctx, cmd_name):
        return super().get_command(ctx, self._aliases.get(cmd_name, cmd_name))


@click.group(cls=AliasedGroup)
@click.option("--verbose", is_flag=True, default=False, help="More verbose output")
@click.option("--diff-oneway", "diff_oneway", is_flag=True, default=False, help="Generate diff one-way instead of default two-way")
@click.option("--debug", is_flag=True, default=False, help="Log HTTP and resolution details to stderr")
@click.option("--settings", "settings_path", default=None, envvar="KDMQ_SETTINGS", type=click.Path(exists=True, path_type=Path), help="YAML settings file with metadata URL templates")
@click.version_option(version=VERSION, prog_name="kdmq")
@click.pass_context
def cli(ctx, verbose, diff_oneway, debug, settings_path):
    """Query and diff Kubernetes distribution metadata (KDM)."""
    _configure_logging(debug)
    client = KDMClient()
    ctx.call_on_close(client.close)
    ctx.obj = {
        "verbose": verbose,
        "diff_oneway": diff_oneway,
        "settings": _load_settings(settings_path),
        "client": client,
    }


@cli.command("listk8s")
@click.argument("rancher_version")
@click.argument("channel")
@click.option("--product", "-p", default="rke", type=click.Choice(VALID_PRODUCTS), help="Distribution to list versions for")
@click.option("--latest", is_flag=True, default=False, help="Only the newest patch of each minor version")
@click.pass_obj
def listk8s(obj, rancher_version, channel, product, latest):
    """List k8s versions for Rancher version."""
    try:
        data = _resolve(obj, rancher_version, channel)
        k8s_versions = list_k8s_versions(data, rancher_version, product)
        if latest:
            k8s_versions = latest_per_minor(k8s_versions)
    except KDMQError as e:
        raise click.ClickException(str(e))

    if obj["verbose"]:
        click.echo(
            f"Kubernetes versions found for version [{rancher_version}] in channel [{channel}]:\n"
            f"{join_lines(k8s_versions)}"
        )
        return
    click.echo(join_lines(k8s_versions))


@cli.command("diffk8s")
@click.argument("rancher_version1")
@click.argument("rancher_version2")
@click.argument("channel1")
@click.argument("channel2", required=False, default=None)
@click.pass_obj
def diffk8s(obj, rancher_version1, rancher_version2, channel1, channel2):
    """Diff k8s versions of two Rancher versions.

    Without CHANNEL2 both versions are looked up in the CHANNEL1 document.
    """
    try:
        data1 = _resolve(obj, rancher_version1, channel1)
        data2 = _resolve(obj, rancher_version2, channel2) if channel2 else data1
        k8s_versions1 = list_k8s_versions(data1, rancher_version1)
        k8s_versions2 = list_k8s_versions(data2, rancher_version2)
    except KDMQError as e:
        raise click.ClickException(str(e))

    diff = sorted(_diff(obj, k8s_versions1, k8s_versions2))

    if obj["verbose"]:
        click.echo(
            section(f"Kubernetes versions found for version [{rancher_version1}] in channel [{channel1}]:", k8s_versions1)
            + "\n"
            + section(f"Kubernetes versions found for version [{rancher_version2}] in channel [{channel2 or channel1}]:", k8s_versions2)
            + f"\nDifference:\n{join_lines(diff)}\n"
        )
        return
    click.echo(join_lines(diff))


@cli.command("diffallk8simages")
@click.argument("rancher_version1")
@click.argument("rancher_version2")
@click.argument("channel1")
@click.argument("channel2")
@click.pass_obj
def diffallk8simages(obj, rancher_version1, rancher_version2, channel1, channel2):
    """Diff all images between two Rancher versions."""
    try:
        data1 = _resolve(obj, rancher_version1, channel1)
        data2 = _resolve(obj, rancher_version2, channel2)
        images1 = images_for_release(data1, list_k8s_versions(data1, rancher_version1))
        images2 = images_for_release(data2, list_k8s_versions(data2, rancher_version2))
    except KDMQError as e:
        raise click.ClickException(str(e))

    diff = sorted(unique(_diff(obj, images1, images2)))

    if obj["verbose"]:
        click.echo(
            section(f"Images found for version [{rancher_version1}] in channel [{channel1}]:", images1)
            + "\n"
            + section(f"Images found for version [{rancher_version2}] in channel [{channel2}]:", images2)
            + f"\nDifference:\n{join_lines(diff)}\n"
        )
        return
    click.echo(join_lines(diff))


@cli.command("listk8simages")
@click.argument("k8s_version")
@click.argument("channel_version")
@click.argument("channel")
@click.pass_obj
def listk8simages(obj, k8s_version, channel_version, channel):
    """List images of a k8s version."""
    try:
        data = fetch_channel_data(channel, channel_version, obj["client"], obj["settings"])
        images = require_images_for_k8s_version(data, k8s_version)
    except KDMQError as e:
        raise click.ClickException(str(e))

    if obj["verbose"]:
        click.echo(section(f"Images for Kubernetes version [{k8s_version}] for channel [{channel}]:", images))
        return
    click.echo(join_lines(images))


@cli.command("diffk8simages")
@click.argument("k8s_version1")
@click.argument("k8s_version2")
@click.argument("channel_version")
@click.argument("channel")
@click.pass_obj
def diffk8simages(obj, k8s_version1, k8s_version2, channel_version, channel):
    """Diff images of two k8s versions."""
    try:
        data = fetch_channel_data(channel, channel_version, obj["client"], obj["settings"])
        images1 = require_images_for_k8s_version(data, k8s_version1)
        images2 = require_images_for_k8s_version(data, k8s_version2)
    except KDMQError as e:
        raise click.ClickException(str(e))

    diff = _diff(obj, images1, images2)

    if obj["verbose"]:
        click.echo(
            section(f"Images [{len(images1)}] for Kubernetes version [{k8s_version1}] for channel [{channel}]:", images1)
            + "\n"
            + section(f"Images [{len(images2)}] for Kubernetes version [{k8s_version2}] for channel [{channel}]:", images2)
            + f"\nDifference:\n{join_lines(diff)}"
        )
        return
    click.echo(join_lines(diff))


@cli.command("listk8saddons")
@click.argument("k8s_version")
@click.argument("channel_version")
@click.argument("channel")
@click.pass_obj
def listk8saddons(obj, k8s_version, channel_version, channel):
    """List add-on templates of a k8s version."""
    try:
        data = fetch_channel_data(channel, channel_version, obj["client"], obj["settings"])
    except KDMQError as e:
        raise click.ClickException(str(e))

    headers = ["Addon", "Template name"] if obj["verbose"] else None
    table = render_table(addon_rows(data, k8s_version), headers)

    if obj["verbose"]:
        click.echo(f"Addons for Kubernetes version [{k8s_version}] for channel [{channel}]:\n\n{table}")
        return
    click.echo(table)


@cli.command("diffk8saddons")
@click.argument("k8s_version1")
@click.argument("k8s_version2")
@click.argument("channel_version")
@click.argument("channel")
@click.pass_obj
def diffk8saddons(obj, k8s_version1, k8s_version2, channel_version, channel):
    """Diff add-on templates of two k8s versions."""
    try:
        data = fetch_channel_data(channel, channel_version, obj["client"], obj["settings"])
    except KDMQError as e:
        raise click.ClickException(str(e))

    headers = ["Addon", k8s_version1, k8s_version2, "Diff?"] if obj["verbose"] else None
    click.echo(render_table(addon_diff_rows(data, k8s_version1, k8s_version2), headers))


def _resolve(obj: dict, rancher_version: str, channel: str):
    try:
        return resolve(rancher_version, channel, obj["client"], obj["settings"])
    except KDMQError as e:
        raise click.ClickException(
            f"Error while retrieving KDM data for version [{rancher_version}] in channel [{channel}], error [{e}]"
        ) from e


def _diff(obj: dict, first: list[str], second: list[str]) -> list[str]:
    # one-way reports what the second side adds
    if obj["diff_oneway"]:
        return diff_one_way(second, first)
    return diff_symmetric(first, second)


def _configure_logging(debug: bool):
    level = logging.DEBUG if debug else logging.ERROR
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s", stream=sys.stderr)
    logging.getLogger("kdmq").setLevel(level)
    logging.getLogger("urllib3").setLevel(level)


def _load_settings(settings_path: Path | None):
    try:
        return load_settings(settings_path)
    except yaml.YAMLError as e:
        raise click.ClickException(f"Invalid YAML in settings file {settings_path}: {e}")
    except ValidationError as e:
        errors = "; ".join(
            f"{'.'.join(str(x) for x in err['loc'])}: {err['msg']}"
            for err in e.errors()
        )
        raise click.ClickException(f"Settings validation error in {settings_path}: {errors}")
