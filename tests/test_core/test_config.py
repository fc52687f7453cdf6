"""Unit tests for YAML configuration loading."""

import tempfile
import unittest
from pathlib import Path

from netsieve.core.config import (
    get_config_dir,
    load_classifier,
    load_sanitizer_options,
    parse_sanitizer_options,
)
from netsieve.core.constants import Rule
from netsieve.core.exceptions import ConfigError, PresetNotFoundError
from netsieve.core.models import RegexPattern, RequestEvent
from netsieve.sanitizer.engine import PassthroughClassifier
from netsieve.sanitizer.presets import get_preset


class ConfigTestCase(unittest.TestCase):
    """Base class writing YAML files into a temporary directory."""

    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        self.root = Path(self.temp_dir.name)

    def tearDown(self):
        self.temp_dir.cleanup()

    def write(self, name: str, content: str) -> Path:
        path = self.root / name
        path.write_text(content)
        return path


class TestLoadSanitizerOptions(ConfigTestCase):
    """Test loading of the sanitizer section."""

    def test_loads_options(self):
        path = self.write("sanitizer.yaml", """
sanitizer:
  slow_request_threshold_ms: 3000
  own_domains: [app.example.com]
  api_patterns:
    - /api/
    - regex: "^https://api\\\\."
""")
        options = load_sanitizer_options(path)

        self.assertEqual(options.slow_request_threshold_ms, 3000)
        self.assertEqual(options.own_domains, ["app.example.com"])
        self.assertEqual(options.api_patterns[0], "/api/")
        self.assertEqual(options.api_patterns[1], {"regex": "^https://api\\."})
        self.assertIsNone(options.error_status_threshold)

    def test_base_preset(self):
        options = parse_sanitizer_options({"preset": "strict", "own_domains": ["app.example.com"]})

        self.assertEqual(options.slow_request_threshold_ms, 5000)
        self.assertEqual(options.api_patterns, ())
        self.assertEqual(options.own_domains, ["app.example.com"])

    def test_debug_cannot_be_base_preset(self):
        with self.assertRaises(ConfigError):
            parse_sanitizer_options({"preset": "debug"})

    def test_unknown_base_preset(self):
        with self.assertRaises(ConfigError):
            parse_sanitizer_options({"preset": "paranoid"})

    def test_unknown_option(self):
        with self.assertRaises(ConfigError) as ctx:
            parse_sanitizer_options({"slow_threshold": 10})
        self.assertIn("slow_threshold", str(ctx.exception))

    def test_list_options_must_be_lists(self):
        with self.assertRaises(ConfigError):
            parse_sanitizer_options({"own_domains": "app.example.com"})

    def test_thresholds_must_be_numbers(self):
        with self.assertRaises(ConfigError):
            parse_sanitizer_options({"slow_request_threshold_ms": "fast"})
        with self.assertRaises(ConfigError):
            parse_sanitizer_options({"error_status_threshold": True})

    def test_missing_file(self):
        with self.assertRaises(ConfigError) as ctx:
            load_sanitizer_options(self.root / "missing.yaml")
        self.assertIn("not found", str(ctx.exception))

    def test_empty_file(self):
        with self.assertRaises(ConfigError):
            load_sanitizer_options(self.write("empty.yaml", ""))

    def test_invalid_yaml(self):
        with self.assertRaises(ConfigError) as ctx:
            load_sanitizer_options(self.write("bad.yaml", "sanitizer: [unclosed"))
        self.assertIn("Failed to parse", str(ctx.exception))

    def test_missing_sanitizer_section(self):
        with self.assertRaises(ConfigError):
            load_sanitizer_options(self.write("preset.yaml", "preset: strict\n"))

    def test_multiple_sections(self):
        path = self.write("both.yaml", "preset: strict\nsanitizer: {}\n")
        with self.assertRaises(ConfigError):
            load_sanitizer_options(path)


class TestLoadClassifier(ConfigTestCase):
    """Test building classifiers from configuration files."""

    def test_sanitizer_file(self):
        path = self.write("checkout.yaml", """
sanitizer:
  slow_request_threshold_ms: 3000
  api_patterns:
    - regex: "/checkout/\\\\d+"
""")
        classifier = load_classifier(path)

        self.assertEqual(classifier.name, "checkout")
        self.assertEqual(classifier.config.slow_request_threshold_ms, 3000)
        self.assertIsInstance(classifier.config.api_patterns[0], RegexPattern)

        event = RequestEvent(url="https://shop.test/checkout/12", method="GET", status=200)
        self.assertEqual(classifier.explain(event).rule, Rule.API_PATTERN)

    def test_preset_file(self):
        classifier = load_classifier(self.write("debug.yaml", "preset: debug\n"))
        self.assertIsInstance(classifier, PassthroughClassifier)

    def test_unknown_preset_file(self):
        with self.assertRaises(PresetNotFoundError):
            load_classifier(self.write("paranoid.yaml", "preset: paranoid\n"))

    def test_base_preset_matches_named_preset(self):
        for name in ("strict", "balanced", "verbose"):
            path = self.write(f"{name}.yaml", f"sanitizer:\n  preset: {name}\n")
            classifier = load_classifier(path, page_hostname="app.example.com")
            expected = get_preset(name, page_hostname="app.example.com")
            self.assertEqual(classifier.config, expected.config)

    def test_page_hostname(self):
        path = self.write("balanced.yaml", "sanitizer:\n  preset: balanced\n")
        classifier = load_classifier(path, page_hostname="app.example.com")
        self.assertEqual(classifier.config.own_domains, ("app.example.com",))

    def test_scoped_file(self):
        path = self.write("scoped.yaml", """
scoped:
  capture_only:
    domains: [api.mysaas.com]
  ignore:
    patterns: [/health]
""")
        classifier = load_classifier(path)

        self.assertEqual(classifier.config.own_domains, ("api.mysaas.com",))
        self.assertIsNotNone(classifier.config.custom_filter)

        health = RequestEvent(url="https://status.mysaas.com/health", method="GET", status=200)
        self.assertFalse(classifier.explain(health).kept)

    def test_scoped_unknown_keys(self):
        path = self.write("scoped.yaml", "scoped:\n  only: {}\n")
        with self.assertRaises(ConfigError):
            load_classifier(path)

    def test_invalid_regex_in_file(self):
        path = self.write("bad-regex.yaml", "sanitizer:\n  api_patterns:\n    - regex: '(['\n")
        with self.assertRaises(ConfigError):
            load_classifier(path)


class TestExampleConfigs(unittest.TestCase):
    """The shipped example configurations load."""

    def test_examples_load(self):
        config_dir = get_config_dir()
        examples = sorted(config_dir.glob("*.example.yaml"))
        if not examples:
            self.skipTest(f"No example configs in {config_dir}")

        for path in examples:
            with self.subTest(path=path.name):
                load_classifier(path)


if __name__ == "__main__":
    unittest.main()
