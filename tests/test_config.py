import sys
import tempfile
import unittest
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from mdreview.config import PreviewConfig, load_preview_config, parse_preview_config
from mdreview.render import DEFAULT_MARKDOWN_EXTENSIONS


class TestPreviewConfig(unittest.TestCase):
    def test_defaults_without_file(self):
        config = load_preview_config(None)
        self.assertEqual(config, PreviewConfig())
        self.assertEqual(config.renderer, "markdown-it")
        self.assertEqual(config.markdown_extensions, DEFAULT_MARKDOWN_EXTENSIONS)

    def test_load_preview_table(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "mdreview.toml"
            path.write_text(
                "\n".join(
                    [
                        "[preview]",
                        'renderer = "Fallback"',
                        'markdown_extensions = ["table"]',
                        'diff_url = "https://github.com/o/r/pull/3/files"',
                        'title = "Docs review"',
                    ]
                ),
                encoding="utf-8",
            )
            config = load_preview_config(path)
        self.assertEqual(config.renderer, "fallback")
        self.assertEqual(config.markdown_extensions, ("table",))
        self.assertEqual(config.diff_url, "https://github.com/o/r/pull/3/files")
        self.assertEqual(config.title, "Docs review")

    def test_top_level_keys_are_accepted(self):
        config = parse_preview_config({"renderer": "fallback", "title": "  "})
        self.assertEqual(config.renderer, "fallback")
        self.assertIsNone(config.title)

    def test_invalid_values_raise(self):
        with self.assertRaisesRegex(RuntimeError, "renderer"):
            parse_preview_config({"preview": {"renderer": "pandoc"}})
        with self.assertRaisesRegex(RuntimeError, "markdown_extensions"):
            parse_preview_config({"preview": {"markdown_extensions": "table"}})

    def test_file_errors_raise(self):
        with tempfile.TemporaryDirectory() as tmp:
            with self.assertRaisesRegex(RuntimeError, "not found"):
                load_preview_config(Path(tmp) / "missing.toml")
            broken = Path(tmp) / "broken.toml"
            broken.write_text("[preview\n", encoding="utf-8")
            with self.assertRaisesRegex(RuntimeError, "Invalid TOML"):
                load_preview_config(broken)

    def test_with_overrides_ignores_none(self):
        config = PreviewConfig(renderer="fallback", title="A")
        self.assertIs(config.with_overrides(renderer=None, title=None), config)
        updated = config.with_overrides(title="B", diff_url=None)
        self.assertEqual(updated.title, "B")
        self.assertEqual(updated.renderer, "fallback")


if __name__ == "__main__":
    unittest.main()
