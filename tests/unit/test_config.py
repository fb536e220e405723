import sys
import unittest
from pathlib import Path

ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(ROOT / "installers" / "node"))

from node_provisioner.config import DEFAULT_VERSION, ProvisionerConfig, load_config


class ConfigTests(unittest.TestCase):
    def test_defaults_when_unset(self):
        cfg = load_config({})
        self.assertEqual(cfg, ProvisionerConfig())
        self.assertEqual(cfg.version, DEFAULT_VERSION)
        self.assertEqual(cfg.install_dir, Path("node_runtime"))
        self.assertFalse(cfg.install_dir.is_absolute())
        self.assertTrue(cfg.verify_checksums)

    def test_overrides(self):
        cfg = load_config({
            "NODE_VERSION": " lts ",
            "NODE_INSTALL_DIR": "/opt/node",
            "NODE_DIST_URL": "https://mirror.example/dist/",
            "NODE_CATALOG_URL": "https://mirror.example/dist/index.json",
            "NODE_VERIFY_CHECKSUMS": "off",
            "NODE_FETCH_AUX": "0",
            "NODE_PROVISIONER_CA_BUNDLE": "/etc/ssl/ca.pem",
        })
        self.assertEqual(cfg.version, "lts")
        self.assertEqual(cfg.install_dir, Path("/opt/node"))
        self.assertEqual(cfg.dist_url, "https://mirror.example/dist")
        self.assertEqual(cfg.catalog_url, "https://mirror.example/dist/index.json")
        self.assertFalse(cfg.verify_checksums)
        self.assertFalse(cfg.fetch_auxiliary)
        self.assertEqual(cfg.ca_bundle, "/etc/ssl/ca.pem")

    def test_blank_values_fall_back(self):
        cfg = load_config({"NODE_VERSION": "  ", "NODE_INSTALL_DIR": "", "NODE_VERIFY_CHECKSUMS": ""})
        self.assertEqual(cfg.version, DEFAULT_VERSION)
        self.assertEqual(cfg.install_dir, Path("node_runtime"))
        self.assertTrue(cfg.verify_checksums)


if __name__ == "__main__":
    unittest.main()
