import os
import shutil
import tempfile
import unittest
from unittest.mock import patch, MagicMock
import requests
from pxinstall import downloader

ASSETS = [
    {"name": "Perple_X_7.1.15_Linux.zip", "browser_download_url": "https://example.com/linux.zip"},
    {"name": "Perple_X_7.1.15_OSX_Intel.zip", "browser_download_url": "https://example.com/osx-intel.zip"},
    {"name": "Perple_X_7.1.15_OSX_ARM.zip", "browser_download_url": "https://example.com/osx-arm.zip"},
    {"name": "Perple_X_7.1.15_OSX_notes.pdf", "browser_download_url": "https://example.com/notes.pdf"},
]


class TestDownloader(unittest.TestCase):

    def test_source_archive_url(self):
        self.assertEqual(
            downloader.source_archive_url("jadconnolly/Perple_X", "v7.1.13"),
            "https://github.com/jadconnolly/Perple_X/archive/refs/tags/v7.1.13.tar.gz",
        )

    def test_pick_mac_asset_prefers_host_architecture(self):
        self.assertEqual(downloader._pick_mac_asset(ASSETS, machine="arm64")["name"], "Perple_X_7.1.15_OSX_ARM.zip")
        self.assertEqual(downloader._pick_mac_asset(ASSETS, machine="x86_64")["name"], "Perple_X_7.1.15_OSX_Intel.zip")

    def test_pick_mac_asset_ignores_other_platforms(self):
        self.assertIsNone(downloader._pick_mac_asset(ASSETS[:1], machine="arm64"))

    @patch('pxinstall.downloader.logger')
    @patch('requests.get')
    def test_find_binary_asset_url(self, mock_get, mock_logger):
        mock_response = MagicMock()
        mock_response.json.return_value = {"tag_name": "v7.1.15", "assets": ASSETS}
        mock_get.return_value = mock_response

        url = downloader.find_binary_asset_url("jadconnolly/Perple_X", "v7.1.15", timeout=5, machine="arm64")

        self.assertEqual(url, "https://example.com/osx-arm.zip")
        mock_get.assert_called_once_with(
            "https://api.github.com/repos/jadconnolly/Perple_X/releases/tags/v7.1.15", timeout=5
        )

    @patch('pxinstall.downloader.logger')
    @patch('requests.get')
    def test_find_binary_asset_url_api_error(self, mock_get, mock_logger):
        mock_get.side_effect = requests.exceptions.RequestException("API is down")
        self.assertIsNone(downloader.find_binary_asset_url("jadconnolly/Perple_X", "v7.1.15"))

    @patch('pxinstall.downloader.logger')
    @patch('pxinstall.downloader.hoist_single_directory')
    @patch('pxinstall.downloader.download_and_extract')
    def test_download_source_archive(self, mock_download_and_extract, mock_hoist, mock_logger):
        mock_download_and_extract.return_value = "/tmp/px/v7.1.13"

        result = downloader.download_source_archive("jadconnolly/Perple_X", "v7.1.13", "/tmp/px/v7.1.13", timeout=10)

        self.assertEqual(result, "/tmp/px/v7.1.13")
        mock_download_and_extract.assert_called_once_with(
            "https://github.com/jadconnolly/Perple_X/archive/refs/tags/v7.1.13.tar.gz",
            "/tmp/px/v7.1.13", filename="Perple_X-v7.1.13.tar.gz", timeout=10, verbose=False,
        )
        mock_hoist.assert_called_once_with("/tmp/px/v7.1.13")

    @patch('pxinstall.downloader.logger')
    @patch('pxinstall.downloader.hoist_single_directory')
    @patch('pxinstall.downloader.download_and_extract', return_value=None)
    def test_download_source_archive_failure(self, mock_download_and_extract, mock_hoist, mock_logger):
        self.assertIsNone(downloader.download_source_archive("jadconnolly/Perple_X", "v7.1.13", "/tmp/px"))
        mock_hoist.assert_not_called()

    @patch('pxinstall.downloader.logger')
    @patch('pxinstall.downloader.download_and_extract')
    def test_download_binary_unwraps_mac_zip_layout(self, mock_download_and_extract, mock_logger):
        bin_dir = tempfile.mkdtemp()
        self.addCleanup(shutil.rmtree, bin_dir, True)

        def fake_extract(url, dest_dir, **kwargs):
            for name in ("Perple_X/werami", "Perple_X/vertex", "__MACOSX/Perple_X/._werami"):
                path = os.path.join(dest_dir, name)
                os.makedirs(os.path.dirname(path), exist_ok=True)
                with open(path, "wb") as f:
                    f.write(b"binary")
            return dest_dir
        mock_download_and_extract.side_effect = fake_extract

        self.assertEqual(downloader.download_binary("https://example.com/osx-arm.zip", bin_dir), bin_dir)

        self.assertEqual(sorted(os.listdir(bin_dir)), ["vertex", "werami"])
        self.assertTrue(os.access(os.path.join(bin_dir, "werami"), os.X_OK))

    @patch('pxinstall.downloader.logger')
    @patch('pxinstall.downloader.run_shell_command')
    def test_clone_head(self, mock_run, mock_logger):
        mock_run.side_effect = [
            (iter(["Cloning into '/tmp/px/head'...\n"]), MagicMock(returncode=0)),
            ("abc1234 Update OSX_makefile2\n", "", 0),
        ]

        result = downloader.clone_head("jadconnolly/Perple_X", "/tmp/px/head")

        self.assertEqual(result, "/tmp/px/head")
        mock_run.assert_any_call(
            ["git", "clone", "--depth", "1", "https://github.com/jadconnolly/Perple_X.git", "/tmp/px/head"],
            stream_output=True,
        )

    @patch('pxinstall.downloader.logger')
    @patch('pxinstall.downloader.run_shell_command')
    def test_clone_head_failure(self, mock_run, mock_logger):
        mock_run.return_value = (iter([]), MagicMock(returncode=128))
        self.assertIsNone(downloader.clone_head("jadconnolly/Perple_X", "/tmp/px/head"))
        mock_run.assert_called_once()


if __name__ == '__main__':
    unittest.main()
