import sys
import unittest
from pathlib import Path

ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(ROOT / "installers" / "node"))

from node_provisioner.catalog import ReleaseEntry, parse_catalog
from node_provisioner.errors import NoCandidates, VersionNotFound
from node_provisioner.resolver import filter_by_channel, highest_version, normalize_selector, resolve_version

FIXTURE = ROOT / "tests" / "fixtures" / "index.json"


def _entry(version: str, lts: str = "false") -> ReleaseEntry:
    return ReleaseEntry(
        version=version,
        release_date="2019-01-01",
        available_files=("linux-x64",),
        v8_version="7.0",
        lts_channel=lts,
    )


class FilterByChannelTests(unittest.TestCase):
    def setUp(self):
        self.catalog = parse_catalog(FIXTURE.read_bytes())

    def test_lts_in_catalog_order(self):
        versions = [e.version for e in filter_by_channel(self.catalog, "lts")]
        self.assertEqual(versions, ["v10.15.1", "v10.15.0", "v8.15.0", "v8.9.4", "v6.16.0", "v4.9.1"])

    def test_lts_excludes_only_sentinel(self):
        entries = list(filter_by_channel(self.catalog, "lts"))
        self.assertTrue(all(e.lts_channel != "false" for e in entries))
        self.assertEqual(len(entries), sum(1 for e in self.catalog if e.lts_channel != "false"))

    def test_exact_version(self):
        matches = list(filter_by_channel(self.catalog, "v10.15.1"))
        self.assertEqual(len(matches), 1)
        self.assertEqual(matches[0].lts_channel, "Dubnium")

    def test_exact_version_is_string_equality(self):
        self.assertEqual(list(filter_by_channel(self.catalog, "10.15.1")), [])
        self.assertEqual(list(filter_by_channel(self.catalog, "v99.0.0")), [])

    def test_lazy_and_restartable(self):
        first = filter_by_channel(self.catalog, "lts")
        self.assertNotIsInstance(first, (list, tuple))
        self.assertEqual(list(first), list(filter_by_channel(self.catalog, "lts")))


class HighestVersionTests(unittest.TestCase):
    def setUp(self):
        self.catalog = parse_catalog(FIXTURE.read_bytes())

    def test_highest_lts(self):
        self.assertEqual(highest_version(filter_by_channel(self.catalog, "lts")).version, "v10.15.1")

    def test_highest_overall(self):
        self.assertEqual(highest_version(self.catalog).version, "v11.10.0")

    def test_numeric_not_lexicographic(self):
        picked = highest_version([_entry("v9.9.9"), _entry("v10.0.0"), _entry("v10.2.0"), _entry("v1.99.99")])
        self.assertEqual(picked.version, "v10.2.0")

    def test_pair_from_catalog(self):
        picked = highest_version([_entry("v10.15.1", "Dubnium"), _entry("v11.10.0")])
        self.assertEqual(picked.version, "v11.10.0")

    def test_empty_raises(self):
        with self.assertRaises(NoCandidates):
            highest_version([])
        with self.assertRaises(NoCandidates):
            highest_version(filter_by_channel(self.catalog, "v0.0.0"))


class ResolveVersionTests(unittest.TestCase):
    def setUp(self):
        self.catalog = parse_catalog(FIXTURE.read_bytes())

    def test_channels(self):
        self.assertEqual(resolve_version(self.catalog, "lts").version, "v10.15.1")
        self.assertEqual(resolve_version(self.catalog, "LTS").version, "v10.15.1")
        self.assertEqual(resolve_version(self.catalog, "latest").version, "v11.10.0")

    def test_exact_with_or_without_prefix(self):
        self.assertEqual(resolve_version(self.catalog, "10.15.0").version, "v10.15.0")
        self.assertEqual(resolve_version(self.catalog, "v8.9.4").lts_channel, "Carbon")

    def test_unknown_version(self):
        with self.assertRaises(VersionNotFound) as ctx:
            resolve_version(self.catalog, "12.0.0")
        self.assertEqual(ctx.exception.selector, "12.0.0")

    def test_normalize_selector(self):
        self.assertEqual(normalize_selector(" 10.15.1 "), "v10.15.1")
        self.assertEqual(normalize_selector("Latest"), "latest")


if __name__ == "__main__":
    unittest.main()
