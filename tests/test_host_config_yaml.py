import tempfile
import unittest
from pathlib import Path

from stabby.commands.host import format_host_lines, load_hosts
from stabby.core.models import HostConfigError


class HostFileLoadingTests(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.path = Path(self._tmp.name) / "stabby_config.yaml"

    def tearDown(self):
        self._tmp.cleanup()

    def _write(self, text: str) -> None:
        self.path.write_text(text, encoding="utf-8")

    def test_load_hosts_preserves_order_and_duplicates(self):
        self._write(
            """
servers:
  - host: 10.0.0.1
    port: 22
    desc: build box
    password: s1
  - host: 10.0.0.2
    port: 2222
    desc: ""
    password: s2
  - host: 10.0.0.1
    port: 22
    desc: build box
    password: s1
"""
        )

        hosts = load_hosts(self.path)

        self.assertEqual([h.host for h in hosts], ["10.0.0.1", "10.0.0.2", "10.0.0.1"])
        self.assertEqual(hosts[1].port, 2222)
        self.assertEqual(hosts[1].description, "")
        self.assertEqual(hosts[0].secret, "s1")
        self.assertEqual(hosts[0], hosts[2])

    def test_missing_fields_use_defaults(self):
        self._write("servers:\n  - host: example.com\n")

        hosts = load_hosts(self.path)

        self.assertEqual(hosts[0].port, 22)
        self.assertEqual(hosts[0].description, "")
        self.assertEqual(hosts[0].secret, "")
        self.assertIsNone(hosts[0].username)

    def test_optional_user_key(self):
        self._write("servers:\n  - host: example.com\n    user: deploy\n")

        hosts = load_hosts(self.path)

        self.assertEqual(hosts[0].username, "deploy")

    def test_top_level_list_is_accepted(self):
        self._write("- host: a.example.com\n- host: b.example.com\n  port: 2200\n")

        hosts = load_hosts(self.path)

        self.assertEqual([h.address for h in hosts], ["a.example.com:22", "b.example.com:2200"])

    def test_empty_file_gives_empty_list(self):
        self._write("")
        self.assertEqual(load_hosts(self.path), [])

    def test_missing_file_raises(self):
        with self.assertRaises(HostConfigError) as ctx:
            load_hosts(self.path)
        self.assertIn("not found", str(ctx.exception))

    def test_invalid_port_names_entry(self):
        self._write(
            """
servers:
  - host: good.example.com
  - host: bad.example.com
    port: 70000
"""
        )

        with self.assertRaises(HostConfigError) as ctx:
            load_hosts(self.path)

        self.assertEqual(ctx.exception.entry_num, 2)
        self.assertIn("Entry 2", str(ctx.exception))
        self.assertIn("70000", str(ctx.exception))

    def test_non_mapping_entry_raises(self):
        self._write("servers:\n  - just-a-string\n")

        with self.assertRaises(HostConfigError) as ctx:
            load_hosts(self.path)

        self.assertIn("Entry 1", str(ctx.exception))

    def test_unparsable_yaml_raises(self):
        self._write("servers: [unclosed\n")

        with self.assertRaises(HostConfigError):
            load_hosts(self.path)


class HostListingTests(unittest.TestCase):
    def test_listing_never_shows_secret(self):
        from stabby.core.models import HostRecord

        hosts = [
            HostRecord(host="10.0.0.1", port=22, description="db", secret="hunter2"),
            HostRecord(host="10.0.0.22", port=2222, description="", secret="x", username="ops"),
        ]

        lines = format_host_lines(hosts)

        self.assertEqual(len(lines), 2)
        self.assertTrue(lines[0].startswith("  1. 10.0.0.1:22"))
        self.assertTrue(lines[0].endswith("db"))
        self.assertIn("[ops]", lines[1])
        self.assertFalse(any("hunter2" in line for line in lines))


if __name__ == "__main__":
    unittest.main()
