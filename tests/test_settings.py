import unittest

from s3_file_manager.settings import AppSettings, load_settings


class LoadSettingsTests(unittest.TestCase):
    def test_defaults_when_environment_empty(self):
        settings = load_settings({})

        self.assertEqual(AppSettings(), settings)

    def test_reads_prefixed_variables(self):
        settings = load_settings(
            {
                "S3FM_HOST": "0.0.0.0",
                "S3FM_PORT": "9090",
                "S3FM_LOG_LEVEL": "debug",
                "S3FM_TEMP_DIR": "/var/tmp/uploads",
                "S3FM_DOWNLOAD_CHUNK_SIZE": "1024",
                "S3FM_MAX_LIST_KEYS": "50",
            }
        )

        self.assertEqual("0.0.0.0", settings.host)
        self.assertEqual(9090, settings.port)
        self.assertEqual("DEBUG", settings.log_level)
        self.assertEqual("/var/tmp/uploads", settings.resolved_temp_dir())
        self.assertEqual(1024, settings.download_chunk_size)
        self.assertEqual(50, settings.max_list_keys)

    def test_sanitizes_invalid_values(self):
        settings = load_settings(
            {
                "S3FM_PORT": "nope",
                "S3FM_LOG_LEVEL": "loud",
                "S3FM_UPLOAD_CHUNK_SIZE": "-5",
                "S3FM_MAX_LIST_KEYS": "0",
                "S3FM_HOST": "   ",
            }
        )

        self.assertEqual(AppSettings.port, settings.port)
        self.assertEqual(AppSettings.log_level, settings.log_level)
        self.assertEqual(AppSettings.upload_chunk_size, settings.upload_chunk_size)
        self.assertEqual(AppSettings.max_list_keys, settings.max_list_keys)
        self.assertEqual(AppSettings.host, settings.host)

    def test_temp_dir_falls_back_to_system_default(self):
        self.assertTrue(AppSettings().resolved_temp_dir())


if __name__ == "__main__":
    unittest.main()
