"""CLI interface for pycosync."""

import logging
from typing import Any, Callable, Optional

import click

from .api import CosClient
from .cli_progress import run_sync_with_progress
from .config import SyncSettings, is_github_actions, load_settings_from_env
from .exceptions import CosConfigError, CosError
from .object_lister import ObjectListManager
from .output import OutputFormatter
from .sync import SyncEngine, SyncPair

logger = logging.getLogger(__name__)

FAILURE_PREFIX = "fail to upload files to cos"


def connection_options(func: Callable) -> Callable:
    """Options shared by every command that talks to a bucket.

    Values not given on the command line fall back to ``COS_*`` and then
    GitHub Actions ``INPUT_*`` environment variables.
    """
    options = [
        click.option("--secret-id", help="COS SecretId [env: COS_SECRET_ID]"),
        click.option("--secret-key", help="COS SecretKey [env: COS_SECRET_KEY]"),
        click.option(
            "--bucket", "-b", help="Bucket name with APPID suffix [env: COS_BUCKET]"
        ),
        click.option("--region", help="Bucket region, e.g. ap-guangzhou"),
        click.option(
            "--remote-path", "-r", help="Remote prefix objects are stored under"
        ),
        click.option(
            "--accelerate/--no-accelerate",
            default=None,
            help="Use the global acceleration endpoint",
        ),
        click.option("--endpoint", help="Override the service URL"),
        click.option(
            "--max-retries",
            type=int,
            default=None,
            help="Retries per request for transient errors (default: 3)",
        ),
        click.option(
            "--timeout",
            type=float,
            default=None,
            help="Request timeout in seconds (default: 60)",
        ),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def _resolve_settings(
    ctx: Any, out: OutputFormatter, **overrides: Any
) -> SyncSettings:
    """Merge CLI values over environment settings and validate them."""
    settings = load_settings_from_env().merged_with(**overrides)
    try:
        return settings.validate()
    except CosConfigError as e:
        out.error(str(e))
        ctx.exit(1)
        raise  # Unreachable, but helps type checker


def _build_client(settings: SyncSettings) -> CosClient:
    return CosClient(
        secret_id=settings.secret_id,
        secret_key=settings.secret_key,
        bucket=settings.bucket,
        region=settings.region,
        accelerate=settings.accelerate,
        endpoint=settings.endpoint,
        max_retries=settings.max_retries,
        timeout=settings.timeout,
    )


@click.group()
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output")
@click.option("--json", is_flag=True, help="Output in JSON format")
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose/debug logging output",
)
@click.version_option(package_name="pycosync")
@click.pass_context
def main(ctx: Any, quiet: bool, json: bool, verbose: bool) -> None:
    """pycosync - Mirror a local directory into a Tencent COS bucket."""
    ctx.ensure_object(dict)
    ctx.obj["out"] = OutputFormatter(
        json_output=json, quiet=quiet, github_actions=is_github_actions()
    )
    ctx.obj["verbose"] = verbose

    # Configure logging based on verbose flag
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%H:%M:%S",
        )
        logging.getLogger("pycosync").setLevel(logging.DEBUG)
        # Request-level noise from the SDK stays at INFO
        logging.getLogger("qcloud_cos").setLevel(logging.INFO)
    else:
        logging.basicConfig(level=logging.WARNING)


@main.command()
@click.argument("local_path", type=click.Path(), required=False)
@connection_options
@click.option(
    "--clean/--no-clean",
    default=None,
    help="Delete remote objects that no longer exist locally",
)
@click.option(
    "--workers",
    "-j",
    type=int,
    default=1,
    show_default=True,
    help="Number of parallel uploads/deletes",
)
@click.option("--dry-run", is_flag=True, help="Show the plan without transferring")
@click.option("--no-progress", is_flag=True, help="Print progress lines, no bar")
@click.pass_context
def sync(
    ctx: Any,
    local_path: Optional[str],
    secret_id: Optional[str],
    secret_key: Optional[str],
    bucket: Optional[str],
    region: Optional[str],
    remote_path: Optional[str],
    accelerate: Optional[bool],
    endpoint: Optional[str],
    max_retries: Optional[int],
    timeout: Optional[float],
    clean: Optional[bool],
    workers: int,
    dry_run: bool,
    no_progress: bool,
) -> None:
    """Upload new and changed files from LOCAL_PATH to the bucket.

    Files whose MD5 matches the remote ETag are skipped. With --clean,
    remote objects under the prefix that have no local counterpart are
    deleted after all uploads succeed.

    Examples:
        pycosync sync ./public -b site-1250000000 --region ap-guangzhou
        pycosync sync ./dist -r static --clean -j 8
        pycosync sync ./dist --dry-run
    """
    out: OutputFormatter = ctx.obj["out"]

    settings = _resolve_settings(
        ctx,
        out,
        local_path=local_path,
        secret_id=secret_id,
        secret_key=secret_key,
        bucket=bucket,
        region=region,
        remote_path=remote_path,
        accelerate=accelerate,
        endpoint=endpoint,
        max_retries=max_retries,
        timeout=timeout,
        clean=clean,
        workers=workers,
    )
    pair = SyncPair.from_settings(settings)

    with _build_client(settings) as client:
        engine = SyncEngine(client, out, hash_workers=settings.workers)
        use_bar = (
            not no_progress
            and not out.quiet
            and not out.json_output
            and out.console.is_terminal
        )
        if use_bar:
            report = run_sync_with_progress(
                engine, pair, dry_run=dry_run, max_workers=settings.workers
            )
        else:
            report = engine.sync_pair(
                pair, dry_run=dry_run, max_workers=settings.workers
            )

    if out.json_output:
        out.output_json(report.to_dict())

    if not report.ok:
        out.error(f"{FAILURE_PREFIX}: {report.error_message}")
        ctx.exit(1)


@main.command()
@click.argument("local_path", type=click.Path(), required=False)
@connection_options
@click.option(
    "--clean/--no-clean",
    default=None,
    help="Include remote objects that would be deleted",
)
@click.pass_context
def diff(
    ctx: Any,
    local_path: Optional[str],
    secret_id: Optional[str],
    secret_key: Optional[str],
    bucket: Optional[str],
    region: Optional[str],
    remote_path: Optional[str],
    accelerate: Optional[bool],
    endpoint: Optional[str],
    max_retries: Optional[int],
    timeout: Optional[float],
    clean: Optional[bool],
) -> None:
    """Show which files a sync of LOCAL_PATH would upload and delete."""
    out: OutputFormatter = ctx.obj["out"]

    settings = _resolve_settings(
        ctx,
        out,
        local_path=local_path,
        secret_id=secret_id,
        secret_key=secret_key,
        bucket=bucket,
        region=region,
        remote_path=remote_path,
        accelerate=accelerate,
        endpoint=endpoint,
        max_retries=max_retries,
        timeout=timeout,
        clean=clean,
    )
    pair = SyncPair.from_settings(settings)

    try:
        with _build_client(settings) as client:
            local_index, remote_index, result = SyncEngine(client, out).plan(pair)
    except CosError as e:
        out.error(str(e))
        ctx.exit(1)
        return

    if out.json_output:
        out.output_json(
            {
                "local_files": len(local_index),
                "remote_files": len(remote_index),
                "upload": list(result.to_upload),
                "delete": list(result.to_delete),
            }
        )
        return

    for path in result.to_upload:
        reason = "new" if path not in remote_index else "changed"
        out.info(f"↑ {path} ({reason})")
    for path in result.to_delete:
        out.info(f"✗ {path}")
    if result.is_empty:
        out.success("No changes needed - everything is in sync!")
    else:
        summary = f"{len(result.to_upload)} to upload"
        if pair.clean:
            summary += f", {len(result.to_delete)} to clean"
        out.info(summary)


@main.command(name="ls")
@connection_options
@click.pass_context
def ls(
    ctx: Any,
    secret_id: Optional[str],
    secret_key: Optional[str],
    bucket: Optional[str],
    region: Optional[str],
    remote_path: Optional[str],
    accelerate: Optional[bool],
    endpoint: Optional[str],
    max_retries: Optional[int],
    timeout: Optional[float],
) -> None:
    """List objects under the remote prefix with their ETags."""
    out: OutputFormatter = ctx.obj["out"]

    settings = load_settings_from_env().merged_with(
        secret_id=secret_id,
        secret_key=secret_key,
        bucket=bucket,
        region=region,
        remote_path=remote_path,
        accelerate=accelerate,
        endpoint=endpoint,
        max_retries=max_retries,
        timeout=timeout,
    )
    try:
        with _build_client(settings) as client:
            entries = ObjectListManager(client).get_all_with_paths(
                settings.remote_path
            )
    except CosError as e:
        out.error(str(e))
        ctx.exit(1)
        return

    if out.json_output:
        out.output_json(
            [
                {"path": path, "key": e.key, "etag": e.etag, "size": e.size}
                for e, path in entries
            ]
        )
        return

    out.output_table(
        f"{settings.bucket}/{settings.remote_path}",
        ["Path", "Size", "ETag"],
        [[path, out.format_size(e.size), e.etag] for e, path in entries],
    )
    out.info(f"{len(entries)} object(s)")


if __name__ == "__main__":
    main()
