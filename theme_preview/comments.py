"""Markdown bodies for the pull request comments."""

from __future__ import annotations

from typing import Optional

from jinja2 import Environment, StrictUndefined

from . import text
from .markers import theme_marker

_env = Environment(
    autoescape=False,
    keep_trailing_newline=True,
    trim_blocks=True,
    lstrip_blocks=True,
    undefined=StrictUndefined,
)
_env.filters["marker"] = theme_marker

PREVIEW_TEMPLATE = _env.from_string(
    """\
## 🚀 Shopify Theme Preview

**Preview your changes:** {{ preview_url }}

**Theme:** {{ theme_name }}  
**Theme ID:** `{{ theme_id }}`

{% if warning %}
### ⚠️ Warnings

```
{{ warning }}
```

{% endif %}
This preview theme will be automatically deleted when the PR is closed or merged.

{{ theme_id | marker }}
"""
)

ERROR_TEMPLATE = _env.from_string(
    """\
## ❌ Shopify Theme Preview Failed

Failed to create theme preview due to the following errors:

```
{{ error }}
```

### Store Info:
- **Store URL**: `{{ store }}`

Please fix these issues and push your changes to trigger a new deployment.
"""
)


def render_preview_comment(
    theme_name: str,
    theme_id: str,
    preview_url: str,
    warning: Optional[str] = None,
) -> str:
    return PREVIEW_TEMPLATE.render(
        theme_name=theme_name,
        theme_id=theme_id,
        preview_url=preview_url,
        warning=text.clean_cli_output(warning) if warning else None,
    )


def render_error_comment(error: str, store: str) -> str:
    """Failure comment; carries no theme id since failed themes are deleted."""
    return ERROR_TEMPLATE.render(
        error=text.clean_cli_output(error) or "Unknown error",
        store=text.normalize_store(store),
    )
