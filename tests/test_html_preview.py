import hashlib
import sys
import unittest
from html import escape
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from mdreview.html_preview import block_html_id, comment_url, github_diff_anchor, render_preview_html
from mdreview.models import Block, LineObservation
from mdreview.preview import NO_MARKDOWN_FILES, NOTHING_TO_PREVIEW, DiffPreview, build_file_preview
from mdreview.render import FallbackRenderer


def make_preview() -> DiffPreview:
    first = build_file_preview(
        "docs/guide.md",
        [
            LineObservation(1, True, "# Guide"),
            LineObservation(2, True, "Body <text>"),
            LineObservation(3, True, "more"),
        ],
        FallbackRenderer(),
    )
    second = build_file_preview("docs/<empty>.md", [], FallbackRenderer())
    return DiffPreview(source="main...HEAD", files=(first, second))


class TestHtmlPreview(unittest.TestCase):
    def test_blocks_carry_anchor_and_line_range(self):
        html = render_preview_html(make_preview())
        self.assertIn("id='mdreview-block-1-3'", html)
        self.assertIn("data-start='1' data-end='3'", html)
        self.assertIn("Lines 1&ndash;3", html)
        self.assertIn("<h1>Guide</h1>\n<p>Body &lt;text&gt;</p>", html)
        self.assertIn("Blocks: 1.", html)

    def test_comment_link_requires_diff_url(self):
        html = render_preview_html(make_preview())
        self.assertNotIn("mdreview-comment", html)

        url = "https://github.com/org/repo/pull/7/files"
        html = render_preview_html(make_preview(), diff_url=url)
        digest = hashlib.sha256(b"docs/guide.md").hexdigest()
        self.assertIn(f"href='{url}#diff-{digest}R1'", html)

    def test_empty_file_and_paths_are_escaped(self):
        html = render_preview_html(make_preview(), title="Review <1>")
        self.assertIn("docs/&lt;empty&gt;.md", html)
        self.assertIn(escape(NOTHING_TO_PREVIEW), html)
        self.assertIn("<title>Review &lt;1&gt;</title>", html)
        self.assertIn("Files: 2 / Blocks: 1", html)

    def test_preview_without_files(self):
        html = render_preview_html(DiffPreview(source="stdin"))
        self.assertIn(escape(NO_MARKDOWN_FILES), html)
        self.assertIn("<li>(no files)</li>", html)


class TestAnchors(unittest.TestCase):
    def test_github_diff_anchor(self):
        digest = hashlib.sha256("README.md".encode("utf-8")).hexdigest()
        self.assertEqual(github_diff_anchor("README.md"), f"diff-{digest}")

    def test_comment_url_drops_existing_fragment(self):
        block = Block(start_line=12, end_line=14, text="x")
        url = comment_url("https://github.com/o/r/pull/1/files#top", "a.md", block)
        self.assertTrue(url.startswith("https://github.com/o/r/pull/1/files#diff-"))
        self.assertTrue(url.endswith("R12"))
        self.assertIsNone(comment_url(None, "a.md", block))

    def test_block_html_id(self):
        block = Block(start_line=4, end_line=6, text="x")
        self.assertEqual(block_html_id(0, block), "mdreview-block-4-6")
        self.assertEqual(block_html_id(2, block), "mdreview-block-4-6-f2")


if __name__ == "__main__":
    unittest.main()
