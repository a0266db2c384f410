import os
import shutil
import tempfile
import unittest
from unittest.mock import patch, MagicMock
from pxinstall import builder


class TestBuild(unittest.TestCase):

    def setUp(self):
        self.source_root = tempfile.mkdtemp()
        self.src_dir = os.path.join(self.source_root, "src")

    def tearDown(self):
        shutil.rmtree(self.source_root, ignore_errors=True)

    def _write_makefile(self):
        os.makedirs(self.src_dir, exist_ok=True)
        with open(os.path.join(self.src_dir, "OSX_makefile2"), "w") as f:
            f.write("all:\n")

    @patch('pxinstall.builder.logger')
    def test_missing_src_dir(self, mock_logger):
        self.assertIsNone(builder.build(self.source_root))
        mock_logger.error.assert_called_once()

    @patch('pxinstall.builder.logger')
    def test_missing_makefile(self, mock_logger):
        os.makedirs(self.src_dir)
        self.assertIsNone(builder.build(self.source_root))
        self.assertIn("OSX_makefile2", mock_logger.error.call_args[0][0])

    @patch('pxinstall.builder.logger')
    @patch('pxinstall.builder.run_shell_command')
    def test_runs_make_in_src(self, mock_run, mock_logger):
        self._write_makefile()
        mock_run.return_value = (iter(["gfortran -c werami.f\n"]), MagicMock(returncode=0))

        result = builder.build(self.source_root, makefile="OSX_makefile2", jobs=4)

        self.assertEqual(result, self.src_dir)
        mock_run.assert_called_once_with(
            ["make", "-f", "OSX_makefile2", "-j4"], stream_output=True, cwd=self.src_dir
        )

    @patch('pxinstall.builder.logger')
    @patch('pxinstall.builder.run_shell_command')
    def test_make_failure(self, mock_run, mock_logger):
        self._write_makefile()
        mock_run.return_value = (iter([]), MagicMock(returncode=2))

        self.assertIsNone(builder.build(self.source_root))
        mock_logger.error.assert_called_once()


class TestCollectExecutables(unittest.TestCase):

    def setUp(self):
        self.build_dir = tempfile.mkdtemp()
        self.install_dir = tempfile.mkdtemp()

    def tearDown(self):
        shutil.rmtree(self.build_dir, ignore_errors=True)
        shutil.rmtree(self.install_dir, ignore_errors=True)

    @patch('pxinstall.builder.logger')
    def test_copies_into_backup_and_bin(self, mock_logger):
        for exe in ["werami", "vertex"]:
            with open(os.path.join(self.build_dir, exe), "w") as f:
                f.write("#!/bin/sh\n")

        copied, missing = builder.collect_executables(
            self.build_dir, self.install_dir, ["werami", "vertex", "meemum"]
        )

        self.assertEqual(copied, ["werami", "vertex"])
        self.assertEqual(missing, ["meemum"])
        for sub in ["bin", "bin_backup"]:
            self.assertEqual(sorted(os.listdir(os.path.join(self.install_dir, sub))), ["vertex", "werami"])
        mock_logger.warning.assert_called_once_with("Executable 'meemum' not found after build.")


if __name__ == '__main__':
    unittest.main()
