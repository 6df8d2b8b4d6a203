import hashlib
import os
import shutil
import tempfile
import unittest
from cargo_bitbake.license import (
    CLOSED_LICENSE, MD5_PLACEHOLDER, find_license_file, parse_expression, resolve_license,
)


def md5_of(text):
    return hashlib.md5(text.encode()).hexdigest()


class TestParseExpression(unittest.TestCase):

    def test_slash_separated(self):
        self.assertEqual(parse_expression("MIT/Apache-2.0"), (["MIT", "Apache-2.0"], "MIT | Apache-2.0", 0))

    def test_whitespace_is_trimmed(self):
        self.assertEqual(parse_expression(" MIT / Apache-2.0 ")[1], "MIT | Apache-2.0")

    def test_spdx_operators(self):
        self.assertEqual(parse_expression("(MIT OR Apache-2.0)")[1], "MIT | Apache-2.0")
        self.assertEqual(parse_expression("MIT AND BSD-3-Clause")[1], "MIT & BSD-3-Clause")

    def test_empty_components_are_dropped(self):
        self.assertEqual(parse_expression("MIT//Apache-2.0"), (["MIT", "Apache-2.0"], "MIT | Apache-2.0", 1))


class TestLicenseFiles(unittest.TestCase):

    def setUp(self):
        self.crate_root = tempfile.mkdtemp()

    def tearDown(self):
        shutil.rmtree(self.crate_root)

    def _write(self, relative, text="license text\n"):
        path = os.path.join(self.crate_root, relative)
        os.makedirs(os.path.dirname(path), exist_ok=True)
        with open(path, "w") as f:
            f.write(text)

    def test_dual_license(self):
        self._write("LICENSE-MIT", "mit\n")
        self._write("LICENSE-APACHE", "apache\n")
        outcome = resolve_license("MIT/Apache-2.0", None, self.crate_root)
        info = outcome.value
        self.assertEqual(info.license, "MIT | Apache-2.0")
        self.assertFalse(info.single)
        self.assertEqual(len(info.files), 2)
        self.assertEqual(info.files[0].relative_path, "LICENSE-MIT")
        self.assertEqual(info.files[0].md5, md5_of("mit\n"))
        self.assertEqual(info.files[1].relative_path, "LICENSE-APACHE")
        self.assertEqual(info.files[1].md5, md5_of("apache\n"))
        self.assertEqual(outcome.warnings, [])

    def test_single_license_uses_generic_file(self):
        self._write("LICENSE")
        info = resolve_license("MIT", None, self.crate_root).value
        self.assertTrue(info.single)
        self.assertEqual(info.files[0].relative_path, "LICENSE")

    def test_dual_license_ignores_generic_file(self):
        self._write("LICENSE")
        outcome = resolve_license("MIT/Apache-2.0", None, self.crate_root)
        paths = [entry.relative_path for entry in outcome.value.files]
        self.assertEqual(paths, ["LICENSE-MIT", "LICENSE-Apache-2.0"])
        self.assertTrue(all(entry.md5 == MD5_PLACEHOLDER for entry in outcome.value.files))
        self.assertEqual(len(outcome.warnings), 2)

    def test_case_insensitive_match(self):
        self._write("license-mit")
        self.assertEqual(find_license_file(self.crate_root, "MIT", False), "license-mit")

    def test_license_sub_directory(self):
        self._write(os.path.join("LICENSES", "MIT.txt"))
        self.assertEqual(find_license_file(self.crate_root, "MIT", True), "LICENSES/MIT.txt")

    def test_missing_file(self):
        self.assertIsNone(find_license_file(self.crate_root, "MIT", True))

    def test_rel_dir_prefix(self):
        self._write("LICENSE-MIT")
        info = resolve_license("MIT", None, self.crate_root, rel_dir="crates/foo").value
        expected = "file://crates/foo/LICENSE-MIT;md5=" + md5_of("license text\n")
        self.assertEqual(info.files[0].directive(), expected)

    def test_closed_license(self):
        outcome = resolve_license(None, None, self.crate_root)
        self.assertEqual(outcome.value.license, CLOSED_LICENSE)
        self.assertEqual(len(outcome.value.files), 1)
        self.assertEqual(outcome.value.files[0].directive(), "file://CLOSED;md5=generateme")
        self.assertIn("Assuming CLOSED license", outcome.notes)

    def test_license_file_fallback(self):
        self._write(os.path.join("docs", "COPYRIGHT"), "all mine\n")
        outcome = resolve_license(None, "docs/COPYRIGHT", self.crate_root)
        self.assertEqual(outcome.value.license, "COPYRIGHT")
        self.assertEqual(len(outcome.value.files), 1)
        self.assertEqual(outcome.value.files[0].relative_path, "docs/COPYRIGHT")
        self.assertEqual(outcome.value.files[0].md5, md5_of("all mine\n"))

    def test_missing_license_file_fallback(self):
        outcome = resolve_license(None, "COPYRIGHT", self.crate_root)
        self.assertEqual(outcome.value.files[0].md5, MD5_PLACEHOLDER)
        self.assertEqual(len(outcome.warnings), 1)

    def test_license_file_naming_a_directory(self):
        os.makedirs(os.path.join(self.crate_root, "legal"))
        outcome = resolve_license(None, "legal", self.crate_root)
        self.assertEqual(outcome.value.files[0].relative_path, "legal")
        self.assertEqual(outcome.value.files[0].md5, MD5_PLACEHOLDER)
        self.assertEqual(len(outcome.warnings), 1)


if __name__ == "__main__":
    unittest.main()
