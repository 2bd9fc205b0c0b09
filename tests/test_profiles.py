import json
import tempfile
import unittest
from unittest import mock
from pathlib import Path

from s3_file_manager.profiles import ConfigurationError, ProfileStorage, normalize_endpoint


class FakeKeychain:
    def __init__(self):
        self.secrets = {}
        self.get_calls = []

    def get_secret(self, access_key: str) -> str:
        self.get_calls.append(access_key)
        return self.secrets.get(access_key, "")


class ProfileStorageTests(unittest.TestCase):
    def _storage(self, tmp, payload, keychain=None):
        path = Path(tmp) / "credentials.json"
        if isinstance(payload, str):
            path.write_text(payload, encoding="utf-8")
        else:
            path.write_text(json.dumps(payload), encoding="utf-8")
        return ProfileStorage(path, keychain=keychain or FakeKeychain())

    def test_load_reads_camel_case_key_names(self):
        with tempfile.TemporaryDirectory() as tmp:
            storage = self._storage(
                tmp,
                {"hostname": "minio.internal:9000", "accessKey": "AKIA1234ABCD", "secretKey": "secret"},
            )

            profile = storage.load()

            self.assertEqual("https://minio.internal:9000", profile.endpoint_url)
            self.assertEqual("AKIA1234ABCD", profile.access_key)
            self.assertEqual("secret", profile.secret_key)
            self.assertEqual("us-east-1", profile.region)
            self.assertTrue(profile.force_path_style)
            self.assertEqual("AKIA***ABCD", profile.masked_access_key)

    def test_load_accepts_snake_case_and_options(self):
        with tempfile.TemporaryDirectory() as tmp:
            storage = self._storage(
                tmp,
                {
                    "endpoint_url": "http://localhost:9000",
                    "access_key": "a",
                    "secret_key": "b",
                    "region": "eu-west-1",
                    "verify_ssl": "false",
                },
            )

            profile = storage.load()

            self.assertEqual("http://localhost:9000", profile.endpoint_url)
            self.assertEqual("eu-west-1", profile.region)
            self.assertFalse(profile.verify_ssl)
            self.assertEqual("***", profile.masked_access_key)

    def test_load_uses_keychain_when_secret_missing(self):
        keychain = FakeKeychain()
        keychain.secrets["AKIA1234ABCD"] = "stored-secret"
        with tempfile.TemporaryDirectory() as tmp:
            storage = self._storage(tmp, {"hostname": "minio", "accessKey": "AKIA1234ABCD"}, keychain)

            profile = storage.load()

            self.assertEqual("stored-secret", profile.secret_key)
            self.assertEqual(["AKIA1234ABCD"], keychain.get_calls)

    def test_missing_file_fails_fast(self):
        with tempfile.TemporaryDirectory() as tmp:
            storage = ProfileStorage(Path(tmp) / "absent.json", keychain=FakeKeychain())

            with self.assertRaises(ConfigurationError):
                storage.load()

    def test_malformed_json_fails_fast(self):
        with tempfile.TemporaryDirectory() as tmp:
            storage = self._storage(tmp, "{not json")

            with self.assertRaises(ConfigurationError):
                storage.load()

    def test_non_object_payload_fails_fast(self):
        with tempfile.TemporaryDirectory() as tmp:
            storage = self._storage(tmp, ["hostname"])

            with self.assertRaises(ConfigurationError):
                storage.load()

    def test_missing_fields_fail_fast(self):
        cases = [
            {"accessKey": "a", "secretKey": "b"},
            {"hostname": "minio", "secretKey": "b"},
            {"hostname": "minio", "accessKey": "a"},
        ]
        for payload in cases:
            with self.subTest(payload=payload), tempfile.TemporaryDirectory() as tmp:
                storage = self._storage(tmp, payload)

                with self.assertRaises(ConfigurationError):
                    storage.load()

    def test_path_from_environment(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "custom.json"
            with mock.patch.dict("os.environ", {"S3FM_CREDENTIALS": str(path)}):
                storage = ProfileStorage(keychain=FakeKeychain())

            self.assertEqual(path, storage.path)


class NormalizeEndpointTests(unittest.TestCase):
    def test_adds_https_scheme(self):
        self.assertEqual("https://minio.example.com", normalize_endpoint("minio.example.com/"))
        self.assertEqual("http://localhost:9000", normalize_endpoint("http://localhost:9000"))


if __name__ == "__main__":
    unittest.main()
