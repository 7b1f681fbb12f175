import sys
import unittest
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from mdreview.render import (
    FallbackRenderer,
    MarkdownItRenderer,
    MarkdownRenderer,
    create_renderer,
    render_fallback,
    render_safely,
)


class BrokenRenderer:
    def render(self, text):
        raise ValueError("engine exploded")


class WrongTypeRenderer:
    def render(self, text):
        return None


class UpperRenderer:
    def render(self, text):
        return text.upper()


class TestFallbackRenderer(unittest.TestCase):
    def test_heading_levels(self):
        self.assertEqual(render_fallback("# Title"), "<h1>Title</h1>")
        self.assertEqual(render_fallback("   ###### Deep"), "<h6>Deep</h6>")

    def test_heading_content_is_escaped_and_trimmed(self):
        self.assertEqual(render_fallback("### A <b> "), "<h3>A &lt;b&gt;</h3>")

    def test_inline_code_and_bold(self):
        self.assertEqual(
            render_fallback("Use `x<y>` and **bold** & more"),
            "<p>Use <code>x&lt;y&gt;</code> and <strong>bold</strong> &amp; more</p>",
        )

    def test_each_line_becomes_an_element(self):
        self.assertEqual(render_fallback("a\n#nospace\n"), "<p>a</p>\n<p>#nospace</p>\n<p></p>")

    def test_quotes_are_left_alone(self):
        self.assertEqual(render_fallback('say "hi"'), '<p>say "hi"</p>')

    def test_script_tags_never_survive(self):
        self.assertNotIn("<script>", render_fallback("<script>alert(1)</script>"))

    def test_fallback_renderer_matches_function(self):
        self.assertEqual(FallbackRenderer().render("**x**"), render_fallback("**x**"))
        self.assertIsInstance(FallbackRenderer(), MarkdownRenderer)


class TestMarkdownItRenderer(unittest.TestCase):
    def test_renders_heading_and_table(self):
        renderer = MarkdownItRenderer()
        self.assertIn("<h1>T</h1>", renderer.render("# T"))
        self.assertIn("<table>", renderer.render("| a | b |\n|---|---|\n| 1 | 2 |"))

    def test_raw_html_is_escaped(self):
        html = MarkdownItRenderer().render("<script>x</script>")
        self.assertNotIn("<script>", html)
        self.assertIn("&lt;script&gt;", html)

    def test_linkify_turns_urls_into_links(self):
        html = MarkdownItRenderer().render("see https://example.com")
        self.assertIn('<a href="https://example.com">', html)

    def test_extensions_can_be_reduced(self):
        html = MarkdownItRenderer(extensions=()).render("| a | b |\n|---|---|\n| 1 | 2 |")
        self.assertNotIn("<table>", html)


class TestRendererSelection(unittest.TestCase):
    def test_create_renderer_by_name(self):
        self.assertIsInstance(create_renderer("fallback"), FallbackRenderer)
        self.assertIsInstance(create_renderer("markdown-it"), MarkdownItRenderer)

    def test_create_renderer_rejects_unknown_names(self):
        with self.assertRaises(RuntimeError):
            create_renderer("pandoc")
        with self.assertRaises(RuntimeError):
            create_renderer("markdown-it", ("no-such-rule",))

    def test_render_safely_uses_given_renderer(self):
        self.assertEqual(render_safely(UpperRenderer(), "abc"), "ABC")

    def test_render_safely_without_renderer_uses_fallback(self):
        self.assertEqual(render_safely(None, "# x"), "<h1>x</h1>")

    def test_render_safely_recovers_from_exceptions(self):
        with self.assertLogs("mdreview.render", level="WARNING") as captured:
            html = render_safely(BrokenRenderer(), "**b**")
        self.assertEqual(html, "<p><strong>b</strong></p>")
        self.assertTrue(any("engine exploded" in line for line in captured.output))

    def test_render_safely_rejects_non_string_output(self):
        with self.assertLogs("mdreview.render", level="WARNING"):
            html = render_safely(WrongTypeRenderer(), "x")
        self.assertEqual(html, "<p>x</p>")


if __name__ == "__main__":
    unittest.main()
