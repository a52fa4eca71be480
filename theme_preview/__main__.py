"""Entry point for the theme preview tool.

Executing ``python -m theme_preview`` forwards to the CLI defined in
``theme_preview.cli``.
"""
from .cli import main


if __name__ == "__main__":
    raise SystemExit(main())
