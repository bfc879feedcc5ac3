import os
import shutil
import stat
import tempfile
import unittest
from pathlib import Path

from test_utils import (
    run_script, create_temp_file, read_file_content,
    GRINNING, NORMAL_TEXT
)


class TestErrorHandling(unittest.TestCase):

    def setUp(self):
        self.test_dir = tempfile.mkdtemp(prefix="nej_err_")

    def tearDown(self):
        # Restore permissions so rmtree can clean up
        os.chmod(self.test_dir, stat.S_IRWXU)
        for root, dirs, files in os.walk(self.test_dir):
            for d_name in dirs:
                os.chmod(os.path.join(root, d_name), stat.S_IRWXU)
            for f_name in files:
                try:
                    os.chmod(os.path.join(root, f_name), stat.S_IRWXU)
                except OSError:
                    pass
        shutil.rmtree(self.test_dir)

    def test_file_not_found(self):
        non_existent_file = Path(self.test_dir) / "ghost.txt"
        result = run_script(["--dry-run", non_existent_file])
        self.assertEqual(result.returncode, 1)
        self.assertIn(f"File not found: {non_existent_file}", result.stderr)
        self.assertEqual(result.stdout, "")

    def test_missing_file_does_not_stop_the_run(self):
        non_existent_file = Path(self.test_dir) / "ghost.txt"
        good_file = create_temp_file(self.test_dir, "good.txt", f"{GRINNING}")
        result = run_script(["--dry-run", non_existent_file, good_file])
        self.assertEqual(result.returncode, 1)
        self.assertEqual(result.stdout, f'File: "{good_file}", Emojis removed: 1\n')

    def test_unopenable_path_does_not_stop_the_run(self):
        parent = create_temp_file(self.test_dir, "file.txt", NORMAL_TEXT)
        good_file = create_temp_file(self.test_dir, "good.txt", f"{GRINNING}")
        result = run_script(["--dry-run", parent / "child", good_file])
        self.assertEqual(result.returncode, 1)
        self.assertIn(f"Not a directory: {parent / 'child'}", result.stderr)
        self.assertNotIn("Traceback", result.stderr)
        self.assertEqual(result.stdout, f'File: "{good_file}", Emojis removed: 1\n')

    @unittest.skipUnless(hasattr(os, "mkfifo"), "needs os.mkfifo")
    def test_fifo_is_reported_not_read(self):
        fifo = Path(self.test_dir) / "pipe"
        os.mkfifo(fifo)
        result = run_script(["--dry-run", fifo], timeout=30)
        self.assertEqual(result.returncode, 1)
        self.assertIn(f"Not a regular file: {fifo}", result.stderr)

    def test_directory_argument(self):
        result = run_script(["--dry-run", self.test_dir])
        self.assertEqual(result.returncode, 1)
        self.assertIn("Is a directory", result.stderr)

    def test_binary_file_is_not_a_failure(self):
        binary_file = create_temp_file(self.test_dir, "binary.dat", b"\x00\x01\x02")
        result = run_script(["-i", binary_file])
        self.assertEqual(result.returncode, 0)
        self.assertEqual(binary_file.read_bytes(), b"\x00\x01\x02")

    @unittest.skipIf(os.name == 'nt' or getattr(os, "geteuid", lambda: 1)() == 0,
                     "Permission tests need a non-root POSIX user")
    def test_permission_denied_reading_file(self):
        no_read_file = create_temp_file(self.test_dir, "no_read.txt", "cant_read_me")
        os.chmod(no_read_file, 0o000)

        result = run_script(["--dry-run", no_read_file])

        self.assertEqual(result.returncode, 1)
        self.assertIn(f"Permission denied: {no_read_file}", result.stderr)

    @unittest.skipIf(os.name == 'nt' or getattr(os, "geteuid", lambda: 1)() == 0,
                     "Permission tests need a non-root POSIX user")
    def test_permission_denied_creating_temp_file(self):
        target_dir = Path(self.test_dir) / "sub"
        target_dir.mkdir()
        file_to_clean = create_temp_file(target_dir, "locked.txt", f"{NORMAL_TEXT}{GRINNING}")
        os.chmod(target_dir, 0o500)  # Read and execute, but not write

        try:
            result = run_script(["-i", file_to_clean])
        finally:
            os.chmod(target_dir, 0o700)

        self.assertEqual(result.returncode, 1)
        self.assertIn(f"Could not create temporary file in {target_dir}", result.stderr)
        self.assertEqual(read_file_content(file_to_clean), f"{NORMAL_TEXT}{GRINNING}")
        self.assertEqual(os.listdir(target_dir), ["locked.txt"])

    @unittest.skipIf(os.name == 'nt', "File permission tests are tricky on Windows")
    def test_permission_preservation_with_os_replace(self):
        test_file = create_temp_file(self.test_dir, "perm.txt", f"{NORMAL_TEXT}{GRINNING}")
        os.chmod(test_file, 0o640)
        original_perms = os.stat(test_file).st_mode

        result = run_script(["-i", test_file])

        self.assertEqual(result.returncode, 0)
        self.assertEqual(read_file_content(test_file), NORMAL_TEXT)
        self.assertEqual(os.stat(test_file).st_mode, original_perms,
                         "File permissions were not preserved after os.replace()")

    @unittest.skipIf(os.name == 'nt', "File permission tests are tricky on Windows")
    def test_read_only_file_in_writable_directory(self):
        test_file = create_temp_file(self.test_dir, "readonly.txt", f"{NORMAL_TEXT}{GRINNING}")
        os.chmod(test_file, 0o444)
        original_perms = os.stat(test_file).st_mode

        result = run_script(["-i", test_file])

        self.assertEqual(result.returncode, 0)
        self.assertEqual(read_file_content(test_file), NORMAL_TEXT)
        self.assertEqual(os.stat(test_file).st_mode, original_perms)

    def test_malformed_utf8_does_not_crash(self):
        test_file = create_temp_file(self.test_dir, "broken.txt", b"ok \xf0\x9f\x98\x80 tail \xf0\x9f")

        result = run_script(["-i", test_file])

        self.assertEqual(result.returncode, 0)
        self.assertEqual(test_file.read_bytes(), b"ok  tail ?")


if __name__ == "__main__":
    unittest.main()
