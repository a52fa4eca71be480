"""Shopify pull-request theme previews.

This package creates one unpublished preview theme per pull request, keeps it
in sync with new pushes, reports the preview link back to the pull request and
to chat channels, and deletes the theme again when the pull request closes.
All real work is done by the Shopify CLI and the GitHub REST API; the code
here sequences those calls and interprets their output.
"""

__version__ = "0.3.0"
