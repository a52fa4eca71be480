from theme_preview.comments import render_error_comment, render_preview_comment
from theme_preview.markers import latest_theme_id


def test_preview_comment_carries_link_and_marker():
    body = render_preview_comment(
        "PR-7 Fix header", "123", "https://demo.myshopify.com?preview_theme_id=123"
    )
    assert body.startswith("## 🚀 Shopify Theme Preview")
    assert "**Preview your changes:** https://demo.myshopify.com?preview_theme_id=123" in body
    assert "**Theme:** PR-7 Fix header  \n**Theme ID:** `123`" in body
    assert "automatically deleted" in body
    assert "Warnings" not in body
    assert body.rstrip().endswith("<!-- SHOPIFY_THEME_ID: 123 -->")
    assert latest_theme_id([{"id": 1, "body": body, "created_at": None}]) == "123"


def test_preview_comment_includes_cleaned_warning():
    body = render_preview_comment("n", "1", "https://x", warning="\x1b[33m  slow   upload \x1b[0m")
    assert "### ⚠️ Warnings" in body
    assert "```\nslow upload\n```" in body


def test_error_comment_has_store_and_no_theme_marker():
    body = render_error_comment("╭──╮\n│ error │\n│ Liquid   syntax │", "https://demo.myshopify.com/")
    assert body.startswith("## ❌ Shopify Theme Preview Failed")
    assert "```\nError:\nLiquid syntax\n```" in body
    assert "- **Store URL**: `demo.myshopify.com`" in body
    assert "SHOPIFY_THEME_ID" not in body


def test_error_comment_with_empty_error():
    assert "Unknown error" in render_error_comment("", "demo.myshopify.com")
