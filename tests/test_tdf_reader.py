import sqlite3
import tempfile
import unittest
from pathlib import Path

from timsio.core import FrameType
from timsio.io import (
    FrameReaderOptions,
    SqlError,
    TDFReader,
)
from timsio.io.sql import GlobalMetadata, SqlPrecursor, SqlReader, SqlWindowGroup
from timsio.utils import ParallelMode

from tdf_builder import METADATA, TIMES, make_dda_run, make_dia_run, make_tdf


class TDFReaderTests(unittest.TestCase):
    def setUp(self):
        self._tmpdir = tempfile.TemporaryDirectory()
        self.root = Path(self._tmpdir.name)
        self.dda = make_dda_run(self.root / 'dda.d')

    def tearDown(self):
        self._tmpdir.cleanup()

    def _reader(self, path, workers=2):
        options = FrameReaderOptions(parallel_mode=ParallelMode.CUSTOM, custom_workers=workers)
        return TDFReader(path, options=options)

    def test_frame_types(self):
        reader = self._reader(self.dda)
        self.assertEqual(len(reader), 4)
        self.assertEqual(
            reader.frame_types,
            [FrameType.MS1, FrameType.MS2_DDA_PASEF, FrameType.MS2_DDA_PASEF, FrameType.MS1],
        )
        self.assertEqual(reader.acquisition_mode, 'ddaPASEF')

    def test_read_single_frame(self):
        reader = self._reader(self.dda)
        frame = reader.read_single_frame(0)
        self.assertEqual(frame.index, 1)
        self.assertEqual(frame.rt, TIMES[0])
        self.assertIs(frame.frame_type, FrameType.MS1)
        self.assertEqual(frame.tof_indices.tolist(), [10, 20, 5])
        with self.assertRaises(IndexError):
            reader.read_single_frame(4)

    def test_frame_without_peaks_keeps_identity(self):
        frame = self._reader(self.dda).read_single_frame(2)
        self.assertTrue(frame.is_empty)
        self.assertEqual(frame.index, 3)
        self.assertIs(frame.frame_type, FrameType.MS2_DDA_PASEF)

    def test_tdf_file_path_is_accepted(self):
        reader = self._reader(self.dda / 'analysis.tdf')
        self.assertEqual(len(reader), 4)
        self.assertEqual(reader.read_single_frame(3).index, 4)

    def test_read_all_frames_in_order(self):
        frames = self._reader(self.dda, workers=4).read_all_frames()
        self.assertEqual([frame.index for frame in frames], [1, 2, 3, 4])
        self.assertEqual([frame.rt for frame in frames], TIMES)

    def test_iter_frames_matches_batch_read(self):
        reader = self._reader(self.dda)
        frames = list(reader.iter_frames())
        self.assertEqual([frame.index for frame in frames], [1, 2, 3, 4])
        self.assertEqual(frames[3].tof_indices.tolist(), [7, 9, 3])

    def test_ms1_batch_has_one_slot_per_frame(self):
        frames = self._reader(self.dda).read_all_ms1_frames()
        self.assertEqual(len(frames), 4)
        self.assertEqual(frames[0].index, 1)
        self.assertEqual(frames[3].index, 4)
        for sentinel in (frames[1], frames[2]):
            self.assertTrue(sentinel.is_empty)
            self.assertIs(sentinel.frame_type, FrameType.UNKNOWN)

    def test_ms2_batch_has_one_slot_per_frame(self):
        frames = self._reader(self.dda).read_all_ms2_frames()
        self.assertEqual(len(frames), 4)
        self.assertTrue(frames[0].is_empty)
        self.assertIs(frames[0].frame_type, FrameType.UNKNOWN)
        self.assertEqual(frames[1].tof_indices.tolist(), [100])
        self.assertIs(frames[2].frame_type, FrameType.MS2_DDA_PASEF)
        self.assertTrue(frames[3].is_empty)

    def test_sequential_and_parallel_reads_agree(self):
        sequential = self._reader(self.dda, workers=1).read_all_frames()
        parallel = self._reader(self.dda, workers=4).read_all_frames()
        for a, b in zip(sequential, parallel):
            self.assertEqual(a.index, b.index)
            self.assertEqual(a.tof_indices.tolist(), b.tof_indices.tolist())

    def test_dda_run_has_no_dia_frames(self):
        reader = self._reader(self.dda)
        self.assertEqual(reader.read_all_dia_frames(), [])
        self.assertEqual(reader.dia_window_groups(), {})

    def test_dia_frames_use_frame_ids_as_positions(self):
        dia = make_dia_run(self.root / 'dia.d', dia_info=[(2, 1), (3, 2), (4, 1), (9, 2)])
        reader = self._reader(dia)
        self.assertEqual(reader.acquisition_mode, 'diaPASEF')
        frames = reader.read_all_dia_frames()
        # Ids 4 and 9 are not valid positions and are dropped
        self.assertEqual([frame.index for frame in frames], [3, 4])
        self.assertEqual([frame.rt for frame in frames], TIMES[2:])

    def test_dia_window_groups(self):
        reader = self._reader(make_dia_run(self.root / 'dia.d'))
        groups = reader.dia_window_groups()
        self.assertEqual(sorted(groups), [1, 2])
        self.assertEqual(groups[1].tolist(), [2])

    def test_converters_built_from_metadata(self):
        reader = self._reader(self.dda)
        self.assertAlmostEqual(reader.im_converter.convert(0), 1.6)
        self.assertAlmostEqual(reader.im_converter.convert(1000), 0.6)
        self.assertAlmostEqual(reader.mz_converter.convert(0), 100.0)
        self.assertAlmostEqual(reader.rt_converter.convert(1), TIMES[1])

    def test_run_metadata(self):
        metadata = self._reader(self.dda).run_metadata
        self.assertEqual(metadata['n_frames'], 4)
        self.assertEqual(metadata['rt_range_seconds'], (0.5, 3.5))

    def test_missing_folder(self):
        with self.assertRaises(FileNotFoundError):
            TDFReader(self.root / 'missing.d')

    def test_wrong_extension(self):
        other = self.root / 'run.raw'
        other.mkdir()
        with self.assertRaises(ValueError):
            TDFReader(other)

    def test_missing_metadata_key(self):
        metadata = dict(METADATA)
        del metadata['DigitizerNumSamples']
        run = make_tdf(self.root / 'nometa.d', msms_types=[0, 0, 0, 0], metadata=metadata)
        with self.assertRaises(SqlError):
            TDFReader(run)


class SqlReaderTests(unittest.TestCase):
    def setUp(self):
        self._tmpdir = tempfile.TemporaryDirectory()
        self.root = Path(self._tmpdir.name)

    def tearDown(self):
        self._tmpdir.cleanup()

    def test_missing_store(self):
        with self.assertRaises(SqlError):
            SqlReader(self.root / 'missing.d')

    def test_query_failure(self):
        run = make_dda_run(self.root / 'dda.d')
        with SqlReader.open(run) as sql_reader:
            self.assertTrue(sql_reader.has_table('Frames'))
            self.assertFalse(sql_reader.has_table('DiaFrameMsMsInfo'))
            with self.assertRaises(SqlError):
                sql_reader.read_query("SELECT * FROM NoSuchTable")
            with self.assertRaises(SqlError):
                SqlWindowGroup.from_sql_reader(sql_reader)

    def test_empty_required_table(self):
        run = make_dda_run(self.root / 'dda.d')
        connection = sqlite3.connect(run / 'analysis.tdf')
        connection.execute("CREATE TABLE DiaFrameMsMsInfo (Frame INTEGER, WindowGroup INTEGER)")
        connection.commit()
        connection.close()
        with SqlReader.open(run) as sql_reader:
            with self.assertRaises(SqlError):
                SqlWindowGroup.from_sql_reader(sql_reader)

    def test_precursor_rows(self):
        run = make_dda_run(self.root / 'dda.d')
        with SqlReader.open(run) as sql_reader:
            precursors = SqlPrecursor.from_sql_reader(sql_reader)
        self.assertEqual([p.id for p in precursors], [1, 2, 3])
        self.assertEqual(precursors[0].mz, 500.25)
        self.assertEqual(precursors[0].charge, 2)
        # Missing monoisotopic m/z falls back to the largest peak
        self.assertEqual(precursors[1].mz, 650.1)
        self.assertIsNone(precursors[1].charge)
        self.assertIsNone(precursors[2].charge)

    def test_global_metadata(self):
        run = make_dda_run(self.root / 'dda.d')
        with SqlReader.open(run) as sql_reader:
            metadata = GlobalMetadata.from_sql(sql_reader)
        self.assertEqual(metadata.tof_max_index, 400000)
        self.assertEqual(metadata.compression_type, 2)
        self.assertEqual(GlobalMetadata().compression_type, 2)
        with self.assertRaises(SqlError):
            GlobalMetadata({'MzAcqRangeLower': 'n/a'}).mz_min


if __name__ == '__main__':
    unittest.main()
