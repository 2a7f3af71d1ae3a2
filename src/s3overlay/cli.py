"""Command-line interface for s3overlay.

This module exposes the read operations of the overlay driver.

Commands:
    - ls: List the direct children of a directory
    - walk: Recursively print every directory and file below a path
    - stat: Show size and modification time of a path
    - cat: Write the content of a path to stdout
    - url: Print a presigned URL for a path

Connection options are shared by every command. Credentials fall back to the
default AWS credential chain when not given.
"""

from datetime import datetime, timedelta, timezone
from typing import Annotated, Optional

import typer

from . import __version__
from .core.exceptions import S3OverlayError
from .objectstorage import FileInfo, S3OverlayDriver, WalkResult

app = typer.Typer(
    name="s3overlay",
    help="Browse an S3 bucket through a translated virtual filesystem.",
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    """Display version information."""
    if value:
        typer.echo(f"s3overlay {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        Optional[bool],
        typer.Option("--version", callback=version_callback, help="Show version."),
    ] = None,
) -> None:
    """
    S3Overlay: a read-only virtual filesystem over S3.
    """
    pass


BucketOption = Annotated[
    str,
    typer.Option(
        "--bucket", "-b", help="S3 bucket name", envvar="S3OVERLAY_BUCKET"
    ),
]
RegionOption = Annotated[str, typer.Option("--region", help="AWS region name")]
EndpointOption = Annotated[
    Optional[str], typer.Option("--endpoint-url", help="Custom S3 endpoint URL")
]
AccessKeyOption = Annotated[
    Optional[str], typer.Option("--access-key-id", help="AWS access key ID")
]
SecretKeyOption = Annotated[
    Optional[str], typer.Option("--secret-access-key", help="AWS secret access key")
]
SessionTokenOption = Annotated[
    Optional[str], typer.Option("--session-token", help="AWS session token")
]
ProfileOption = Annotated[
    Optional[str], typer.Option("--aws-profile", help="AWS CLI profile name")
]
RootDirectoryOption = Annotated[
    str, typer.Option("--root-directory", help="Prefix prepended to every key")
]
MetadataPathOption = Annotated[
    str,
    typer.Option(
        "--metadata-path",
        help="Path of the JSON metadata map under the root directory",
        envvar="S3OVERLAY_METADATA_PATH",
    ),
]


def _create_driver(
    bucket: str,
    region_name: str,
    metadata_path: str,
    root_directory: str = "",
    endpoint_url: Optional[str] = None,
    access_key_id: Optional[str] = None,
    secret_access_key: Optional[str] = None,
    session_token: Optional[str] = None,
    aws_profile: Optional[str] = None,
) -> S3OverlayDriver:
    """Create a driver from command-line options."""
    return S3OverlayDriver.from_parameters(
        {
            "bucket": bucket,
            "region_name": region_name,
            "region_endpoint": endpoint_url,
            "access_key_id": access_key_id,
            "secret_access_key": secret_access_key,
            "session_token": session_token,
            "aws_profile": aws_profile,
            "root_directory": root_directory,
            "metadata_path": metadata_path,
        }
    )


def _format_info(info: FileInfo) -> str:
    if info.is_dir:
        return f"{info.path}/"
    modified = info.mod_time.isoformat() if info.mod_time else "-"
    return f"{info.path}\t{info.size}\t{modified}"


@app.command("ls")
def ls_cmd(
    path: Annotated[str, typer.Argument(help="Virtual directory to list")],
    bucket: BucketOption,
    metadata_path: MetadataPathOption,
    region_name: RegionOption = "us-east-1",
    endpoint_url: EndpointOption = None,
    access_key_id: AccessKeyOption = None,
    secret_access_key: SecretKeyOption = None,
    session_token: SessionTokenOption = None,
    aws_profile: ProfileOption = None,
    root_directory: RootDirectoryOption = "",
) -> None:
    """
    List the direct children of a virtual directory.

    Example:
        s3overlay ls / --bucket mirror --metadata-path /metadata.json
    """
    try:
        driver = _create_driver(
            bucket=bucket,
            region_name=region_name,
            metadata_path=metadata_path,
            root_directory=root_directory,
            endpoint_url=endpoint_url,
            access_key_id=access_key_id,
            secret_access_key=secret_access_key,
            session_token=session_token,
            aws_profile=aws_profile,
        )
        for child in driver.list(path):
            typer.echo(child)

    except S3OverlayError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)


@app.command("walk")
def walk_cmd(
    path: Annotated[str, typer.Argument(help="Virtual directory to walk")],
    bucket: BucketOption,
    metadata_path: MetadataPathOption,
    start_after: Annotated[
        str, typer.Option("--start-after", help="Resume after this virtual path")
    ] = "",
    skip: Annotated[
        Optional[list[str]],
        typer.Option("--skip", help="Directory to prune (repeatable)"),
    ] = None,
    region_name: RegionOption = "us-east-1",
    endpoint_url: EndpointOption = None,
    access_key_id: AccessKeyOption = None,
    secret_access_key: SecretKeyOption = None,
    session_token: SessionTokenOption = None,
    aws_profile: ProfileOption = None,
    root_directory: RootDirectoryOption = "",
) -> None:
    """
    Print every directory and file below a virtual path, depth first.

    Directories are printed with a trailing slash, files with their size and
    modification time.

    Example:
        s3overlay walk /docker --bucket mirror --metadata-path /metadata.json \
            --skip /docker/registry/v2/blobs
    """
    skipped = set(skip or [])

    def visit(info: FileInfo) -> Optional[WalkResult]:
        if info.is_dir and info.path in skipped:
            return WalkResult.skip_subtree()
        typer.echo(_format_info(info))
        return None

    try:
        driver = _create_driver(
            bucket=bucket,
            region_name=region_name,
            metadata_path=metadata_path,
            root_directory=root_directory,
            endpoint_url=endpoint_url,
            access_key_id=access_key_id,
            secret_access_key=secret_access_key,
            session_token=session_token,
            aws_profile=aws_profile,
        )
        driver.walk(path, visit, start_after_hint=start_after)

    except S3OverlayError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)


@app.command("stat")
def stat_cmd(
    path: Annotated[str, typer.Argument(help="Virtual path to inspect")],
    bucket: BucketOption,
    metadata_path: MetadataPathOption,
    region_name: RegionOption = "us-east-1",
    endpoint_url: EndpointOption = None,
    access_key_id: AccessKeyOption = None,
    secret_access_key: SecretKeyOption = None,
    session_token: SessionTokenOption = None,
    aws_profile: ProfileOption = None,
    root_directory: RootDirectoryOption = "",
) -> None:
    """
    Show whether a path is a file or directory, with size and modification time.
    """
    try:
        driver = _create_driver(
            bucket=bucket,
            region_name=region_name,
            metadata_path=metadata_path,
            root_directory=root_directory,
            endpoint_url=endpoint_url,
            access_key_id=access_key_id,
            secret_access_key=secret_access_key,
            session_token=session_token,
            aws_profile=aws_profile,
        )
        info = driver.stat(path)

        typer.echo(f"Path: {info.path}")
        typer.echo(f"Type: {'directory' if info.is_dir else 'file'}")
        if not info.is_dir:
            typer.echo(f"Size: {info.size:,} bytes")
            if info.mod_time:
                typer.echo(f"Modified: {info.mod_time.isoformat()}")

    except S3OverlayError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)


@app.command("cat")
def cat_cmd(
    path: Annotated[str, typer.Argument(help="Virtual path to read")],
    bucket: BucketOption,
    metadata_path: MetadataPathOption,
    offset: Annotated[
        int, typer.Option("--offset", min=0, help="Byte offset to start from")
    ] = 0,
    region_name: RegionOption = "us-east-1",
    endpoint_url: EndpointOption = None,
    access_key_id: AccessKeyOption = None,
    secret_access_key: SecretKeyOption = None,
    session_token: SessionTokenOption = None,
    aws_profile: ProfileOption = None,
    root_directory: RootDirectoryOption = "",
) -> None:
    """
    Write the content of a virtual path to stdout.

    Pointer paths print their synthesized descriptor.
    """
    try:
        driver = _create_driver(
            bucket=bucket,
            region_name=region_name,
            metadata_path=metadata_path,
            root_directory=root_directory,
            endpoint_url=endpoint_url,
            access_key_id=access_key_id,
            secret_access_key=secret_access_key,
            session_token=session_token,
            aws_profile=aws_profile,
        )
        if offset:
            body = driver.reader(path, offset)
            try:
                content = body.read()
            finally:
                body.close()
        else:
            content = driver.get_content(path)

        typer.echo(content, nl=False)

    except S3OverlayError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)


@app.command("url")
def url_cmd(
    path: Annotated[str, typer.Argument(help="Virtual path to presign")],
    bucket: BucketOption,
    metadata_path: MetadataPathOption,
    method: Annotated[
        str, typer.Option("--method", help="HTTP method: 'GET' or 'HEAD'")
    ] = "GET",
    expires_in: Annotated[
        Optional[int],
        typer.Option("--expires-in", min=1, help="URL lifetime in seconds"),
    ] = None,
    region_name: RegionOption = "us-east-1",
    endpoint_url: EndpointOption = None,
    access_key_id: AccessKeyOption = None,
    secret_access_key: SecretKeyOption = None,
    session_token: SessionTokenOption = None,
    aws_profile: ProfileOption = None,
    root_directory: RootDirectoryOption = "",
) -> None:
    """
    Print a presigned URL for a virtual path.
    """
    expiry = None
    if expires_in is not None:
        expiry = datetime.now(timezone.utc) + timedelta(seconds=expires_in)

    try:
        driver = _create_driver(
            bucket=bucket,
            region_name=region_name,
            metadata_path=metadata_path,
            root_directory=root_directory,
            endpoint_url=endpoint_url,
            access_key_id=access_key_id,
            secret_access_key=secret_access_key,
            session_token=session_token,
            aws_profile=aws_profile,
        )
        typer.echo(driver.url_for(path, method=method, expiry=expiry))

    except S3OverlayError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
