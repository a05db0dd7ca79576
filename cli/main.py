"""
PIVTOOLS Site CLI Main Module

Command-line interface for the PIVTOOLS website using Typer.
Runs the development server and checks the content and crawler files
before a deploy.
"""

import json
import logging
from pathlib import Path
from typing import Optional

import typer

from core.config import get_settings, normalize_environment
from core.content import check_content, load_manual_index, set_content_dir
from core.sitemap import build_sitemap, validate_sitemap_xml
from middleware.security_headers import build_security_headers, generate_nonce

# Configure logging
logging.basicConfig(level=logging.INFO, format='%(levelname)s: %(message)s')
logger = logging.getLogger(__name__)

app = typer.Typer(
    name="pivtools-site",
    help="PIVTOOLS website - serve pages and validate manual content",
    add_completion=False
)


@app.command()
def serve(
    host: str = typer.Option("127.0.0.1", "--host", help="Interface to bind"),
    port: int = typer.Option(8000, "--port", "-p", help="Port to listen on"),
    reload: bool = typer.Option(False, "--reload", help="Restart on code changes"),
    log_level: str = typer.Option("info", "--log-level", help="Uvicorn log level")
) -> None:
    """
    Run the site with uvicorn.

    Settings (ENVIRONMENT, SITE_URL, CONTENT_DIR, ...) are read from the
    environment as usual.
    """
    import uvicorn

    settings = get_settings()
    typer.echo(f"Serving PIVTOOLS site on http://{host}:{port} ({settings.environment})")
    uvicorn.run("app:app", host=host, port=port, reload=reload, log_level=log_level)


@app.command()
def check(
    content_dir: Optional[Path] = typer.Option(None, "--content-dir", help="Content root to check (defaults to CONTENT_DIR)")
) -> None:
    """
    Validate every content file and cross-check the manual index.

    Fails when a YAML file does not match its model, a manual page is
    missing, or a subsection anchor is not present in its page.
    """
    if content_dir is not None:
        if not content_dir.is_dir():
            typer.echo(f"Content directory not found: {content_dir}", err=True)
            raise typer.Exit(1)
        set_content_dir(content_dir)

    try:
        problems = check_content()
        index = None if problems else load_manual_index()
    finally:
        if content_dir is not None:
            set_content_dir(None)

    if problems:
        typer.echo(f"✗ Content check FAILED ({len(problems)} problems)", err=True)
        for problem in problems:
            typer.echo(f"  - {problem}", err=True)
        raise typer.Exit(1)

    anchors = sum(len(section.subsections) for section in index.pages)
    typer.echo("✓ Content check PASSED")
    typer.echo(f"  Manual pages: {len(index.pages)}")
    typer.echo(f"  Anchors verified: {anchors}")


@app.command()
def headers(
    environment: str = typer.Option("production", "--environment", "-e", help="production or development"),
    nonce: Optional[str] = typer.Option(None, "--nonce", help="Nonce to embed (random if omitted)"),
    as_json: bool = typer.Option(False, "--json", help="Print headers as a JSON object")
) -> None:
    """Print the security headers a document response carries."""
    production = normalize_environment(environment) == "production"
    header_set = build_security_headers(nonce or generate_nonce(), production)

    if as_json:
        typer.echo(json.dumps(header_set, indent=2))
        return

    for name, value in header_set.items():
        typer.echo(f"{name}: {value}")


@app.command()
def sitemap(
    output: Path = typer.Option(Path("sitemap.xml"), "--output", "-o", help="File to write"),
    base_url: Optional[str] = typer.Option(None, "--base-url", help="Absolute site URL (defaults to SITE_URL)")
) -> None:
    """Write the generated sitemap to a file."""
    url = base_url or get_settings().base_url
    xml = build_sitemap(url, load_manual_index())

    failed = validate_sitemap_xml(xml)
    if failed:
        typer.echo(f"✗ Sitemap failed checks: {', '.join(failed)}", err=True)
        raise typer.Exit(1)

    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(xml, encoding="utf-8")
    typer.echo(f"✓ Sitemap written: {output}")
    typer.echo(f"  URLs: {xml.count('<url>')}")


if __name__ == "__main__":
    app()
