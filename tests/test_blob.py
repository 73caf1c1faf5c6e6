import tempfile
import unittest
from pathlib import Path

import numpy as np

from timsio.io.blob import BinFileReader, decode_frame
from timsio.io.errors import BinFileError

from tdf_builder import FRAMES, encode_frame, write_bin


class DecodeFrameTests(unittest.TestCase):
    def test_scan_offsets_and_tof_indices(self):
        blob = np.array([3, 4, 0, 11, 100, 10, 200, 6, 50], dtype=np.uint32)
        frame = decode_frame(blob)
        self.assertEqual(frame.scan_offsets.tolist(), [0, 2, 2, 3])
        self.assertEqual(frame.tof_indices.tolist(), [10, 20, 5])
        self.assertEqual(frame.intensities.tolist(), [100, 200, 50])

    def test_empty_payloads(self):
        self.assertTrue(decode_frame(np.zeros(0, dtype=np.uint32)).is_empty)
        self.assertTrue(decode_frame(np.array([0], dtype=np.uint32)).is_empty)

    def test_single_scan(self):
        frame = decode_frame(np.array([1, 8, 3, 2, 4], dtype=np.uint32))
        self.assertEqual(frame.scan_offsets.tolist(), [0, 2])
        self.assertEqual(frame.tof_indices.tolist(), [7, 9])
        self.assertEqual(frame.intensities.tolist(), [3, 4])

    def test_scan_sizes_exceeding_payload(self):
        with self.assertRaises(BinFileError):
            decode_frame(np.array([2, 10, 1, 1], dtype=np.uint32))


class BinFileReaderTests(unittest.TestCase):
    def setUp(self):
        self._tmpdir = tempfile.TemporaryDirectory()
        self.path = Path(self._tmpdir.name) / 'analysis.tdf_bin'
        self.offsets = write_bin(self.path, FRAMES)

    def tearDown(self):
        self._tmpdir.cleanup()

    def test_round_trip_through_file(self):
        reader = BinFileReader(self.path, self.offsets)
        self.assertEqual(len(reader), 4)
        self.assertEqual(reader.size(), 4)
        frame = decode_frame(reader.read_blob(0))
        self.assertEqual(frame.scan_offsets.tolist(), [0, 2, 2, 3])
        self.assertEqual(frame.tof_indices.tolist(), [10, 20, 5])
        frame = decode_frame(reader.read_blob(3))
        self.assertEqual(frame.tof_indices.tolist(), [7, 9, 3])
        self.assertEqual(frame.intensities.tolist(), [7, 9, 3])

    def test_header_only_record_is_empty(self):
        reader = BinFileReader(self.path, self.offsets)
        self.assertEqual(reader.read_blob(2).size, 0)
        self.assertTrue(decode_frame(reader.read_blob(2)).is_empty)

    def test_index_out_of_range(self):
        reader = BinFileReader(self.path, self.offsets)
        with self.assertRaises(IndexError):
            reader.read_blob(4)
        with self.assertRaises(IndexError):
            reader.read_blob(-1)

    def test_missing_file(self):
        with self.assertRaises(BinFileError):
            BinFileReader(self.path.with_name('missing.tdf_bin'), self.offsets)

    def test_unsupported_compression(self):
        with self.assertRaises(BinFileError):
            BinFileReader(self.path, self.offsets, compression_type=1)

    def test_truncated_payload(self):
        record = encode_frame(FRAMES[0])
        truncated = self.path.with_name('truncated.tdf_bin')
        truncated.write_bytes(record[:-3])
        reader = BinFileReader(truncated, [0])
        with self.assertRaises(BinFileError):
            reader.read_blob(0)

    def test_corrupt_payload(self):
        corrupt = self.path.with_name('corrupt.tdf_bin')
        corrupt.write_bytes((24).to_bytes(4, 'little') + (1).to_bytes(4, 'little') + b'\xff' * 16)
        reader = BinFileReader(corrupt, [0])
        with self.assertRaises(BinFileError):
            reader.read_blob(0)


if __name__ == '__main__':
    unittest.main()
