# cli.py
import json
import logging

import click

from file_gateway.config.settings import get_settings

logger = logging.getLogger(__name__)


@click.group()
def cli():
    """CLI commands for running and maintaining the file gateway"""
    pass


@cli.command()
@click.option('--host', default='0.0.0.0', help='API host address')
@click.option('--port', default=8000, type=int, help='API port')
def serve(host: str, port: int):
    """Start the HTTP API"""
    import uvicorn
    from file_gateway.main import create_app, setup_logging

    settings = get_settings()
    setup_logging(settings.log_level)
    uvicorn.run(create_app(settings), host=host, port=port)


@cli.command()
def show_config():
    """Show current configuration"""
    settings = get_settings()

    print("Current Configuration:")
    print(f"  Deployment Mode: {settings.deployment_mode}")
    print(f"  AWS Region: {settings.aws_region}")
    print(f"  AWS Endpoint: {settings.aws_endpoint_url}")
    print(f"  S3 Bucket: {settings.s3_bucket_name}")
    print(f"  Blob Prefix: {settings.blob_prefix}")
    print(f"  Metadata Backend: {settings.metadata_backend}")
    if settings.metadata_backend == "sqlite":
        print(f"  SQLite Path: {settings.sqlite_db_path}")
    print(f"  Collections: {settings.files_collection}, {settings.downloads_collection}")


@cli.command()
@click.option('--repair', is_flag=True, help='Delete dangling records and adopt orphaned blobs')
def reconcile(repair: bool):
    """Compare the blob store with the metadata records"""
    from file_gateway.main import create_app, setup_logging

    settings = get_settings()
    setup_logging(settings.log_level)
    service = create_app(settings).state.reconciliation

    result = service.repair() if repair else service.audit()
    print(json.dumps(result.model_dump(by_alias=True), indent=2))


if __name__ == "__main__":
    cli()
