import os
import tempfile
import unittest as ut
from click.testing import CliRunner
from treestore.cli import main
from treestore.storage import LocalDirectory, LocalFile
from tests.helpers import read_tree, stage_test_files


class CliTest(ut.TestCase):

    def setUp(self):
        super().setUp()
        self._temp_dir = tempfile.TemporaryDirectory()
        self.addCleanup(self._temp_dir.cleanup)
        self.base_path = os.path.abspath(self._temp_dir.name)
        self.runner = CliRunner()

    def local_dir(self, name: str) -> str:
        return os.path.join(self.base_path, name) + os.sep

    def local_file(self, *pieces) -> str:
        return os.path.join(self.base_path, *pieces)

    def invoke(self, *args, exit_code: int = 0):
        result = self.runner.invoke(main, list(args))
        self.assertEqual(result.exit_code, exit_code, result.output)
        return result

    def test_mkdir_and_exists(self):
        path = self.local_dir("made")
        result = self.invoke("exists", path, exit_code=1)
        self.assertIn("false", result.output)
        self.invoke("mkdir", path)
        result = self.invoke("exists", path)
        self.assertIn("true", result.output)
        self.invoke("mkdir", path)
        result = self.invoke("mkdir", "--fail-if-exists", path, exit_code=1)
        self.assertIn("AlreadyExistsError", result.output)

    def test_touch(self):
        path = self.local_file("touched.txt")
        self.invoke("touch", path)
        self.assertTrue(os.path.isfile(path))
        self.invoke("touch", "--no-overwrite", path, exit_code=1)

    def test_ls(self):
        stage_test_files(LocalDirectory(self.local_dir("listed")))
        result = self.invoke("ls", self.local_dir("listed"))
        self.assertIn(self.local_dir(os.path.join("listed", "one")), result.output)
        self.assertIn(self.local_file("listed", "a.txt"), result.output)
        self.assertNotIn("x.txt", result.output)

    def test_cat(self):
        LocalFile(self.local_file("cat.txt")).write_all_text("meow")
        result = self.invoke("cat", self.local_file("cat.txt"))
        self.assertIn("meow", result.output)

    def test_cat_binary(self):
        LocalFile(self.local_file("cat.bin")).write_all_bytes(b"\x00\xffbinary\x01")
        result = self.invoke("cat", self.local_file("cat.bin"))
        self.assertIn(b"\x00\xffbinary\x01", result.stdout_bytes)

    def test_cp_directory(self):
        source = stage_test_files(LocalDirectory(self.local_dir("source")))
        self.invoke("cp", self.local_dir("source"), self.local_dir("target"))
        self.assertEqual(read_tree(LocalDirectory(self.local_dir("target"))), read_tree(source))

    def test_cp_file_into_directory(self):
        LocalFile(self.local_file("one.txt")).write_all_text("one")
        LocalDirectory(self.local_dir("into")).create()
        self.invoke("cp", self.local_file("one.txt"), self.local_dir("into"))
        self.assertEqual(LocalFile(self.local_file("into", "one.txt")).read_all_text(), "one")

    def test_mv_directory(self):
        before = read_tree(stage_test_files(LocalDirectory(self.local_dir("source"))))
        self.invoke("mv", self.local_dir("source"), self.local_dir("target"))
        self.assertFalse(os.path.exists(self.local_dir("source")))
        self.assertEqual(read_tree(LocalDirectory(self.local_dir("target"))), before)

    def test_mv_file(self):
        LocalFile(self.local_file("from.txt")).write_all_text("moving")
        self.invoke("mv", self.local_file("from.txt"), self.local_file("to.txt"))
        self.assertFalse(os.path.exists(self.local_file("from.txt")))
        self.assertEqual(LocalFile(self.local_file("to.txt")).read_all_text(), "moving")

    def test_rm(self):
        stage_test_files(LocalDirectory(self.local_dir("removed")))
        result = self.invoke("rm", "--no-recurse", self.local_dir("removed"), exit_code=1)
        self.assertIn("NotEmptyError", result.output)
        self.invoke("rm", self.local_dir("removed"))
        self.assertFalse(os.path.exists(self.local_dir("removed")))

    def test_purge(self):
        stage_test_files(LocalDirectory(self.local_dir("purged")))
        self.invoke("purge", self.local_dir("purged"))
        self.assertTrue(LocalDirectory(self.local_dir("purged")).is_empty())

    def test_errors(self):
        result = self.invoke("cat", self.local_file("missing.txt"), exit_code=1)
        self.assertIn("Error: NotFoundError", result.output)
        result = self.invoke("ls", "ftp://server/dir/", exit_code=1)
        self.assertIn("UnsupportedPathError", result.output)
        result = self.invoke("ls", "s3://bucket/dir/", exit_code=1)
        self.assertIn("BackendUnavailableError", result.output)
