from pathlib import Path
from tempfile import TemporaryDirectory
from unittest import TestCase

from ddt import ddt, data, unpack

from cached_endpoints.storage import FileStorage, MemoryStorage


class TestMemoryStorage(TestCase):
    def test_set_get_delete(self):
        storage = MemoryStorage()

        storage.set('key', 'value')
        self.assertEqual('value', storage.get('key'))
        self.assertEqual(1, len(storage))

        storage.delete('key')
        self.assertIs(None, storage.get('key'))
        self.assertEqual(0, len(storage))

    def test_delete_missing_key_does_nothing(self):
        MemoryStorage().delete('missing')


@ddt
class TestFileStorage(TestCase):
    @data(
        # The sha256 of "http://google.ca" is 98ce0b4f1e9710...
        (5, Path('9', '8', 'c', 'e', '0', 'b4f1e97102727131a3807371ff3494db4343c7ca41027ad7271a47af279')),
        (0, Path('98ce0b4f1e97102727131a3807371ff3494db4343c7ca41027ad7271a47af279')),
        (-3, Path('98ce0b4f1e97102727131a3807371ff3494db4343c7ca41027ad7271a47af279')),
    )
    @unpack
    def test_set_writes_a_sharded_file(self, levels, expected_path):
        with TemporaryDirectory() as directory:
            directory = Path(directory)

            storage = FileStorage(directory, levels)
            storage.set('http://google.ca', 'some contents')

            expected_path = directory / expected_path
            self.assertTrue(expected_path.exists(), 'The storage should create the file for the key')
            with open(expected_path, 'r') as f:
                self.assertEqual('some contents', f.read())

    def test_get_missing_key(self):
        with TemporaryDirectory() as directory:
            self.assertIs(None, FileStorage(Path(directory)).get('missing'))

    def test_values_survive_a_new_instance(self):
        with TemporaryDirectory() as directory:
            FileStorage(Path(directory)).set('key', 'first')
            FileStorage(Path(directory)).set('key', 'second')

            self.assertEqual('second', FileStorage(Path(directory)).get('key'))

    def test_delete(self):
        with TemporaryDirectory() as directory:
            storage = FileStorage(Path(directory))
            storage.set('key', 'value')

            storage.delete('key')
            storage.delete('key')

            self.assertIs(None, storage.get('key'))

    def test_no_temporary_files_are_left_behind(self):
        with TemporaryDirectory() as directory:
            directory = Path(directory)
            storage = FileStorage(directory, 0)
            storage.set('key', 'value')

            self.assertEqual(1, len([p for p in directory.rglob('*') if p.is_file()]))
