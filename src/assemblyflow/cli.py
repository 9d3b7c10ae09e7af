# cli.py
from __future__ import annotations

import json
import sys
from dataclasses import replace

import click

from assemblyflow.dsl import job, sh
from assemblyflow.errors import AssemblyFlowError
from assemblyflow.pipeline import AssemblyPipeline, workflow_to_dict
from assemblyflow.settings import Settings, load_settings
from assemblyflow.strategies import STRATEGY_KINDS
from assemblyflow.ui.console import Console, get_console, set_console


def _fail(ctx: click.Context, exc: Exception) -> None:
    console = get_console()
    if isinstance(exc, AssemblyFlowError):
        console.print_error(
            "Invalid configuration",
            exc.message,
            details=[f"{k}={v}" for k, v in exc.details.items()] or None,
            suggestion="Check the --strategy/--bucket/--region/--seed options or the ASSEMBLYFLOW_* environment.",
        )
        if ctx.obj.get("debug", False):
            console.print_exception(exc)
    else:
        console.print_exception(exc)
    sys.exit(1)


def _resolve_settings(strategy, bucket, region, seed, assume_role_arn, name, directory) -> Settings:
    """Environment settings, overridden by whatever was passed on the command line."""
    settings = load_settings()
    overrides = {
        "strategy": strategy.lower() if strategy else None,
        "bucket": bucket,
        "region": region,
        "seed": seed,
        "assume_role_arn": assume_role_arn,
        "artifact_name": name,
        "assembly_dir": directory,
    }
    return replace(settings, **{k: v for k, v in overrides.items() if v is not None})


def strategy_options(fn):
    """Options shared by every command that builds a strategy."""
    options = [
        click.option(
            "--strategy",
            type=click.Choice(sorted(STRATEGY_KINDS), case_sensitive=False),
            default=None,
            help="Transfer strategy (default: $ASSEMBLYFLOW_STRATEGY or native)",
        ),
        click.option("--bucket", default=None, help="S3 bucket for the s3 strategy"),
        click.option("--region", default=None, help="AWS region for the s3 strategy"),
        click.option("--seed", default=None, help="Namespace token (random when omitted)"),
        click.option("--assume-role-arn", default=None, help="Role assumed after authenticating"),
        click.option("--name", default=None, help="Artifact name (default: cloud-assembly)"),
        click.option("--dir", "directory", default=None, help="Assembly directory (default: cdk.out)"),
    ]
    for option in reversed(options):
        fn = option(fn)
    return fn


@click.group()
@click.option(
    "--debug",
    is_flag=True,
    default=False,
    help="Enable debug mode (show stack traces and detailed output)",
)
@click.pass_context
def cli(ctx, debug):
    """assemblyflow: how the cloud assembly moves between workflow jobs."""
    set_console(Console(debug=debug))
    ctx.ensure_object(dict)
    ctx.obj["debug"] = debug


@cli.command()
@click.argument("direction", type=click.Choice(["upload", "download"]))
@strategy_options
@click.option("--json", "as_json", is_flag=True, default=False, help="Print steps as workflow JSON")
@click.pass_context
def steps(ctx, direction, strategy, bucket, region, seed, assume_role_arn, name, directory, as_json):
    """Print the steps one side of the hand-off needs."""
    console = get_console()
    try:
        settings = _resolve_settings(strategy, bucket, region, seed, assume_role_arn, name, directory)
        transfer = settings.build_strategy()
        console.print_debug(f"strategy={type(transfer).__name__}")

        if direction == "upload":
            result = transfer.upload(settings.artifact_name, settings.assembly_dir)
        else:
            result = transfer.download(settings.artifact_name, settings.assembly_dir)
    except Exception as e:
        _fail(ctx, e)
        return

    if as_json:
        click.echo(json.dumps([s.to_dict() for s in result], indent=2))
    else:
        console.print_info(f"Strategy: {type(transfer).__name__}")
        console.print_steps(f"{direction.upper()} {settings.artifact_name}", result)


@cli.command()
@strategy_options
@click.option("--producer", default="build", show_default=True, help="Job that synthesizes the assembly")
@click.option("--consumer", "consumers", multiple=True, help="Job that deploys it (repeatable, default: deploy)")
@click.option("--workflow-name", default="deploy", show_default=True, help="Name of the generated workflow")
@click.pass_context
def preview(ctx, strategy, bucket, region, seed, assume_role_arn, name, directory, producer, consumers, workflow_name):
    """Print a sample workflow with the assembly hand-off wired in."""
    consumers = list(consumers) or ["deploy"]
    try:
        settings = _resolve_settings(strategy, bucket, region, seed, assume_role_arn, name, directory)
        pipe = AssemblyPipeline(
            settings.build_strategy(),
            artifact_name=settings.artifact_name,
            assembly_dir=settings.assembly_dir,
        )
        jobs = [job(producer, sh("Synth", f"npx cdk synth --output {settings.assembly_dir}"))]
        jobs += [
            job(c, sh("Deploy", f"npx cdk deploy --app {settings.assembly_dir} --require-approval never"), needs=[producer])
            for c in consumers
        ]
        pipe.wire(jobs, producer=producer)
        doc = workflow_to_dict(jobs, name=workflow_name)
    except Exception as e:
        _fail(ctx, e)
        return

    click.echo(json.dumps(doc, indent=2))


if __name__ == "__main__":
    cli()
