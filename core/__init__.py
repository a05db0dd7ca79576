"""
PIVTOOLS Site Core Module

Framework-agnostic logic behind the website:
- Settings from the environment and structured logging
- Content registry (YAML tables and Markdown manual pages)
- Design-variant selection and keyboard map
- Manual navigation state and sitemap generation

Example usage:
    from core.content import load_site, load_manual_page
    from core.design import cycle_design, DesignVariant
"""

__version__ = "0.2.0"
__all__ = [
    "config",
    "content",
    "design",
    "errors",
    "logging",
    "manual",
    "markdown",
    "models",
    "sitemap",
]
