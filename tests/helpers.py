import unittest as ut
import boto3
from moto import mock_aws
from treestore.storage import BaseDirectory, StorageLog


TEST_BUCKET = "test-bucket"


class RecordingLog(StorageLog):
    """StorageLog that keeps every (label, message) event it receives."""

    def __init__(self, label: str = "test"):
        self.events = []
        super().__init__(label, lambda lbl, msg: self.events.append((lbl, msg)))

    def messages(self) -> list[str]:
        return [msg for _, msg in self.events]

    def errors_containing(self, text: str) -> list[str]:
        return [msg for msg in self.messages() if text in msg]


def write_text(directory: BaseDirectory, name: str, content: str):
    file = directory.create_file(directory.path_combine(directory.full_name, name))
    file.write_all_text(content)
    return file


def make_subdir(directory: BaseDirectory, name: str) -> BaseDirectory:
    return directory.create_directory(directory.path_combine(directory.full_name, f"{name}/")).create(verbose=False)


def stage_test_files(directory: BaseDirectory) -> BaseDirectory:
    """Build a small tree: 3 subdirectories and 5 files at the top, 4 directories and 8 files in total."""
    directory.create(verbose=False)
    for name in ("a.txt", "b.txt", "c.csv", "d.bin", "noextension"):
        write_text(directory, name, f"content of {name}\n")
    one = make_subdir(directory, "one")
    write_text(one, "x.txt", "x\n")
    nested = make_subdir(one, "nested")
    write_text(nested, "y.txt", "y\n")
    two = make_subdir(directory, "two")
    write_text(two, "z.txt", "z\n")
    make_subdir(directory, "three")
    return directory


def read_tree(directory: BaseDirectory, prefix: str = "") -> dict[str, str]:
    """Map relative path -> text content for every file in the tree."""
    contents = {}
    for file in directory.get_files():
        contents[prefix + file.name] = file.read_all_text()
    for child in directory.get_directories():
        contents.update(read_tree(child, f"{prefix}{child.name}/"))
    return contents


class S3TestCase(ut.TestCase):
    """Runs each test against a mocked S3 with one empty bucket."""

    def setUp(self):
        super().setUp()
        self._aws = mock_aws()
        self._aws.start()
        self.addCleanup(self._aws.stop)
        self.client = boto3.client("s3", region_name="us-east-1")
        self.client.create_bucket(Bucket=TEST_BUCKET)

    def keys(self, prefix: str = "") -> list[str]:
        keys = []
        paginator = self.client.get_paginator("list_objects_v2")
        for page in paginator.paginate(Bucket=TEST_BUCKET, Prefix=prefix):
            keys.extend(obj["Key"] for obj in page.get("Contents", []))
        return keys
