"""
PIVTOOLS Site CLI Module

Command-line interface for the website using Typer.

Available commands:
- serve: Run the site with uvicorn
- check: Validate content files and manual anchors
- headers: Print the security header set for an environment
- sitemap: Write the generated sitemap to a file

Example usage:
    from cli.main import app as cli_app

    # Or from the command line:
    # pivtools-site check
    # pivtools-site headers --environment development
"""

__version__ = "0.2.0"
__all__ = ["main"]
