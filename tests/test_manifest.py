import os
import shutil
import tempfile
import unittest
from unittest.mock import patch
from cargo_bitbake import manifest
from cargo_bitbake.errors import ManifestError
from cargo_bitbake.models import (
    Branch, DefaultBranch, GitSource, OtherSource, PathSource, RegistrySource, Rev, Tag,
)

LOCKFILE = '''
version = 3

[[package]]
name = "myapp"
version = "0.1.0"
dependencies = ["serde", "gitdep"]

[[package]]
name = "serde"
version = "1.0.200"
source = "registry+https://github.com/rust-lang/crates.io-index"
checksum = "ddc6f9cc94d67c0e21aaf7eda3a010fd3af78ebf6e096aa6e2e13c79749cce4f"

[[package]]
name = "gitdep"
version = "0.3.0"
source = "git+https://github.com/x/gitdep?branch=dev#0123456789abcdef0123456789abcdef01234567"
'''


@patch('cargo_bitbake.manifest.logger')
class TestLoadProject(unittest.TestCase):

    def setUp(self):
        self.root = tempfile.mkdtemp()

    def tearDown(self):
        shutil.rmtree(self.root)

    def _write(self, relative, text):
        path = os.path.join(self.root, relative)
        os.makedirs(os.path.dirname(path), exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            f.write(text)

    def test_single_package(self, mock_logger):
        self._write("Cargo.toml", '''
[package]
name = "myapp"
version = "0.1.0"
description = "  My application  "
license = "MIT/Apache-2.0"

[package.metadata.bitbake]
git_prefix = "gitsm"
''')
        self._write("src/main.rs", "fn main() {}\n")
        project = manifest.load_project(os.path.join(self.root, "src"))
        self.assertEqual(project.package.name, "myapp")
        self.assertEqual(project.package.version, "0.1.0")
        self.assertEqual(project.package.license, "MIT/Apache-2.0")
        self.assertEqual(project.package.rel_dir, "")
        self.assertEqual(project.package.crate_root, os.path.abspath(self.root))
        self.assertEqual(project.workspace_root, os.path.abspath(self.root))
        self.assertEqual(project.bitbake_metadata, {"git_prefix": "gitsm"})

    def test_workspace_member(self, mock_logger):
        self._write("Cargo.toml", '''
[workspace]
members = ["crates/foo"]

[workspace.package]
version = "2.1.0"
license = "MIT"
repository = "https://github.com/me/ws"
''')
        self._write("crates/foo/Cargo.toml", '''
[package]
name = "foo"
version = { workspace = true }
license = { workspace = true }
repository = { workspace = true }
''')
        project = manifest.load_project(os.path.join(self.root, "crates", "foo"))
        self.assertEqual(project.package.version, "2.1.0")
        self.assertEqual(project.package.license, "MIT")
        self.assertEqual(project.package.repository, "https://github.com/me/ws")
        self.assertEqual(project.package.rel_dir, "crates/foo")
        self.assertEqual(project.workspace_root, os.path.abspath(self.root))

    def test_virtual_manifest(self, mock_logger):
        self._write("Cargo.toml", '[workspace]\nmembers = []\n')
        with self.assertRaises(ManifestError):
            manifest.load_project(self.root)

    def test_version_defaults_to_zero(self, mock_logger):
        self._write("Cargo.toml", '[package]\nname = "noversion"\n')
        project = manifest.load_project(self.root)
        self.assertEqual(project.package.version, "0.0.0")

    def test_non_ascii_description(self, mock_logger):
        self._write("Cargo.toml", '[package]\nname = "cafe"\nversion = "1.0.0"\ndescription = "Café ☃"\n')
        project = manifest.load_project(self.root)
        self.assertEqual(project.package.description, "Café ☃")

    def test_manifest_that_is_not_utf8(self, mock_logger):
        with open(os.path.join(self.root, "Cargo.toml"), "wb") as f:
            f.write('[package]\nname = "cafe"\nversion = "1.0.0"\ndescription = "Caf\xe9"\n'.encode("latin-1"))
        with self.assertRaises(ManifestError):
            manifest.load_project(self.root)

    def test_no_manifest(self, mock_logger):
        with self.assertRaises(ManifestError):
            manifest.load_project(self.root)

    def test_load_lockfile(self, mock_logger):
        self._write("Cargo.lock", LOCKFILE)
        dependencies = manifest.load_lockfile(self.root)
        self.assertEqual([d.name for d in dependencies], ["myapp", "serde", "gitdep"])
        self.assertEqual(dependencies[0].source, PathSource())
        self.assertEqual(dependencies[1].source, RegistrySource())
        self.assertEqual(dependencies[2].source, GitSource("https://github.com/x/gitdep?branch=dev", Branch("dev")))

    def test_missing_lockfile(self, mock_logger):
        with self.assertRaises(ManifestError) as cm:
            manifest.load_lockfile(self.root)
        self.assertIn("cargo generate-lockfile", str(cm.exception))


class TestParseSource(unittest.TestCase):

    def test_path(self):
        self.assertEqual(manifest.parse_source(None), PathSource())

    def test_registries(self):
        self.assertEqual(manifest.parse_source("registry+https://github.com/rust-lang/crates.io-index"), RegistrySource())
        self.assertEqual(manifest.parse_source("sparse+https://index.crates.io/"), RegistrySource())

    def test_git_references(self):
        self.assertEqual(manifest.parse_source("git+https://g.com/a?tag=v1#abc").reference, Tag("v1"))
        self.assertEqual(manifest.parse_source("git+https://g.com/a?rev=abc#abc").reference, Rev("abc"))
        self.assertEqual(manifest.parse_source("git+https://g.com/a#abc").reference, DefaultBranch())
        self.assertEqual(manifest.parse_source("git+https://g.com/a#abc").url, "https://g.com/a")

    def test_other(self):
        self.assertEqual(manifest.parse_source("https://example.com/x.tar.gz"), OtherSource("https://example.com/x.tar.gz"))


if __name__ == "__main__":
    unittest.main()
