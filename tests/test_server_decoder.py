"""Tests for decoding server objects with inconsistent field types."""

from __future__ import annotations

import json
import unittest

from vultrlib import FieldCoercionError, MalformedPayload, Server, decode_server
from vultrlib.decoding import NIL_TEXT
from vultrlib.servers import decode_server_map


_SERVER_PAYLOAD = {
    "SUBID": "576965",
    "os": "CentOS 6 x64",
    "ram": "4096 MB",
    "disk": "Virtual 60 GB",
    "main_ip": "123.123.123.123",
    "vcpu_count": "2",
    "location": "New Jersey",
    "DCID": "1",
    "default_password": "nreqnusibni",
    "date_created": "2013-12-19 14:45:41",
    "pending_charges": "46.67",
    "status": "active",
    "cost_per_month": "10.05",
    "current_bandwidth_gb": 131.512,
    "allowed_bandwidth_gb": "1000",
    "netmask_v4": "255.255.255.248",
    "gateway_v4": "123.123.123.1",
    "power_status": "running",
    "server_state": "ok",
    "VPSPLANID": "28",
    "v6_networks": [
        {
            "v6_network": "2001:DB8:1000::",
            "v6_main_ip": "2001:DB8:1000::100",
            "v6_network_size": "64",
        }
    ],
    "label": "my new server",
    "internal_ip": "10.99.0.10",
    "kvm_url": "https://my.vultr.com/subs/novnc/api.php?data=eawxFVZw2mXnhGUV",
    "auto_backups": "yes",
    "tag": "mytag",
}


class DecodeServerTests(unittest.TestCase):
    """Verify the flexible server decoder."""

    def test_decodes_full_payload(self) -> None:
        server = decode_server(json.dumps(_SERVER_PAYLOAD))

        self.assertIsInstance(server, Server)
        self.assertEqual("576965", server.id)
        self.assertEqual("my new server", server.name)
        self.assertEqual("4096 MB", server.ram)
        self.assertEqual(2, server.vcpus)
        self.assertEqual(1, server.region_id)
        self.assertEqual(28, server.plan_id)
        self.assertAlmostEqual(46.67, server.pending_charges)
        self.assertAlmostEqual(131.512, server.current_bandwidth)
        self.assertAlmostEqual(1000.0, server.allowed_bandwidth)
        self.assertEqual("running", server.power_status)
        self.assertEqual("mytag", server.tag)
        self.assertEqual(1, len(server.v6_networks))
        network = server.v6_networks[0]
        self.assertEqual("2001:DB8:1000::", network.network)
        self.assertEqual("2001:DB8:1000::100", network.main_ip)
        self.assertEqual("64", network.network_size)

    def test_accepts_bytes_and_mappings(self) -> None:
        from_bytes = decode_server(json.dumps(_SERVER_PAYLOAD).encode("utf-8"))
        from_mapping = decode_server(_SERVER_PAYLOAD)

        self.assertEqual(from_bytes, from_mapping)

    def test_mixed_number_and_string_fields(self) -> None:
        server = decode_server('{"vcpu_count": 2, "DCID": "7"}')

        self.assertEqual(2, server.vcpus)
        self.assertEqual(7, server.region_id)

    def test_numeric_fields_agree_across_wire_types(self) -> None:
        cases = {
            "vcpu_count": ("vcpus", 4, "4"),
            "DCID": ("region_id", 12, "12"),
            "VPSPLANID": ("plan_id", 201, "201"),
            "pending_charges": ("pending_charges", 1.5, "1.5"),
            "current_bandwidth_gb": ("current_bandwidth", 0.25, "0.25"),
            "allowed_bandwidth_gb": ("allowed_bandwidth", 2000, "2000"),
        }
        for key, (attribute, as_number, as_string) in cases.items():
            with self.subTest(field=key):
                from_number = decode_server({key: as_number})
                from_string = decode_server({key: as_string})
                omitted = decode_server({})
                from_null = decode_server({key: None})

                self.assertEqual(getattr(from_number, attribute), getattr(from_string, attribute))
                self.assertEqual(as_number, getattr(from_number, attribute))
                self.assertEqual(0, getattr(omitted, attribute))
                self.assertEqual(0, getattr(from_null, attribute))

    def test_empty_string_numeric_field_reads_as_zero(self) -> None:
        server = decode_server({"pending_charges": "", "vcpu_count": ""})

        self.assertEqual(0.0, server.pending_charges)
        self.assertEqual(0, server.vcpus)

    def test_integral_float_is_accepted_for_integer_field(self) -> None:
        server = decode_server('{"vcpu_count": 2.0}')

        self.assertEqual(2, server.vcpus)

    def test_non_numeric_string_raises_coercion_error(self) -> None:
        with self.assertRaises(FieldCoercionError) as ctx:
            decode_server({"DCID": "ewr"})

        self.assertEqual("DCID", ctx.exception.field)
        self.assertEqual("ewr", ctx.exception.value)
        self.assertIn("DCID", str(ctx.exception))

    def test_fractional_value_for_integer_field_raises(self) -> None:
        with self.assertRaises(FieldCoercionError) as ctx:
            decode_server({"vcpu_count": "1.5"})

        self.assertEqual("vcpu_count", ctx.exception.field)

    def test_overflowing_float_raises_for_number_and_string(self) -> None:
        for raw in ('{"pending_charges": 1e400}', '{"pending_charges": "1e400"}'):
            with self.subTest(raw=raw):
                with self.assertRaises(FieldCoercionError) as ctx:
                    decode_server(raw)
                self.assertEqual("pending_charges", ctx.exception.field)

    def test_structural_value_for_numeric_field_raises(self) -> None:
        for value in (True, [1], {"value": 1}):
            with self.subTest(value=value):
                with self.assertRaises(FieldCoercionError) as ctx:
                    decode_server({"allowed_bandwidth_gb": value})
                self.assertEqual("allowed_bandwidth_gb", ctx.exception.field)

    def test_missing_text_fields_render_placeholder(self) -> None:
        server = decode_server({"SUBID": "1", "label": None})

        self.assertEqual("1", server.id)
        self.assertEqual("<nil>", server.name)
        self.assertEqual("<nil>", server.os)
        self.assertEqual("<nil>", server.tag)
        self.assertEqual(NIL_TEXT, server.kvm_url)

    def test_numeric_text_fields_render_as_strings(self) -> None:
        server = decode_server('{"SUBID": 576965, "ram": 1024, "cost_per_month": 5.0, "tag": true}')

        self.assertEqual("576965", server.id)
        self.assertEqual("1024", server.ram)
        self.assertEqual("5", server.cost)
        self.assertEqual("true", server.tag)

    def test_empty_v6_networks_array(self) -> None:
        server = decode_server({"v6_networks": []})

        self.assertEqual((), server.v6_networks)

    def test_missing_or_invalid_v6_networks(self) -> None:
        self.assertEqual((), decode_server({}).v6_networks)
        self.assertEqual((), decode_server({"v6_networks": "none"}).v6_networks)

    def test_v6_network_entries_are_text_rendered(self) -> None:
        server = decode_server(
            {"v6_networks": [{"v6_network": "2001:DB8::", "v6_network_size": 64}, "junk"]}
        )

        self.assertEqual(1, len(server.v6_networks))
        network = server.v6_networks[0]
        self.assertEqual("64", network.network_size)
        self.assertEqual("<nil>", network.main_ip)

    def test_malformed_payloads(self) -> None:
        for raw in (b"not json", "[1, 2]", "null", '"text"', b"\xff\xfe"):
            with self.subTest(raw=raw):
                with self.assertRaises(MalformedPayload):
                    decode_server(raw)

    def test_decoded_server_is_immutable(self) -> None:
        server = decode_server({"SUBID": "1"})

        with self.assertRaises(AttributeError):
            server.name = "changed"  # type: ignore[misc]


class DecodeServerMapTests(unittest.TestCase):
    def test_decodes_servers_keyed_by_subid(self) -> None:
        payload = {
            "1": {"SUBID": "1", "label": "alpha", "vcpu_count": 1},
            "2": {"SUBID": "2", "label": "beta", "vcpu_count": "2"},
        }

        servers = decode_server_map(json.dumps(payload))

        self.assertEqual(["alpha", "beta"], [server.name for server in servers])
        self.assertEqual([1, 2], [server.vcpus for server in servers])

    def test_empty_array_means_no_servers(self) -> None:
        self.assertEqual([], decode_server_map(b"[]"))

    def test_rejects_non_object_entries(self) -> None:
        with self.assertRaises(MalformedPayload):
            decode_server_map(b'{"1": "server"}')

    def test_rejects_non_empty_array(self) -> None:
        with self.assertRaises(MalformedPayload):
            decode_server_map(b'[{"SUBID": "1"}]')

    def test_coercion_error_fails_whole_listing(self) -> None:
        payload = {"1": {"SUBID": "1"}, "2": {"SUBID": "2", "VPSPLANID": "large"}}

        with self.assertRaises(FieldCoercionError):
            decode_server_map(json.dumps(payload))


if __name__ == "__main__":  # pragma: no cover - convenience
    unittest.main()
