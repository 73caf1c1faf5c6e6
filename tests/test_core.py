import unittest

import numpy as np

from timsio.core import (
    AcquisitionType,
    Frame,
    Frame2RtConverter,
    FrameType,
    Precursor,
    QuadrupoleSettings,
    Scan2ImConverter,
    Tof2MzConverter,
    position_to_window_group,
    window_group_to_position,
)


class FrameTypeTests(unittest.TestCase):
    def test_msms_type_codes(self):
        self.assertIs(FrameType.from_msms_type(0), FrameType.MS1)
        self.assertIs(FrameType.from_msms_type(8), FrameType.MS2_DDA_PASEF)
        self.assertIs(FrameType.from_msms_type(9), FrameType.MS2_DIA_PASEF)

    def test_other_codes_are_unknown(self):
        for code in (1, 2, 7, 10, -1):
            self.assertIs(FrameType.from_msms_type(code), FrameType.UNKNOWN)

    def test_levels_and_acquisition(self):
        self.assertEqual(FrameType.MS1.ms_level, 1)
        self.assertEqual(FrameType.MS2_DIA_PASEF.ms_level, 2)
        self.assertIsNone(FrameType.UNKNOWN.ms_level)
        self.assertIs(FrameType.MS2_DDA_PASEF.acquisition_type, AcquisitionType.DDA_PASEF)
        self.assertIs(FrameType.MS2_DIA_PASEF.acquisition_type, AcquisitionType.DIA_PASEF)
        self.assertIsNone(FrameType.MS1.acquisition_type)
        self.assertFalse(FrameType.UNKNOWN.is_ms1)
        self.assertFalse(FrameType.UNKNOWN.is_ms2)


class ConverterTests(unittest.TestCase):
    def test_rt_lookup(self):
        converter = Frame2RtConverter([0.5, 1.5, 2.5])
        self.assertEqual(converter.convert(1), 1.5)
        np.testing.assert_allclose(converter.convert_array([0, 2]), [0.5, 2.5])
        self.assertEqual(len(converter), 3)

    def test_rt_out_of_range(self):
        converter = Frame2RtConverter([0.5, 1.5])
        with self.assertRaises(IndexError):
            converter.convert(2)
        with self.assertRaises(IndexError):
            converter.convert(-1)

    def test_rt_fractional_position_rejected(self):
        converter = Frame2RtConverter([0.5, 1.5, 2.5])
        self.assertEqual(converter.convert(1.0), 1.5)
        with self.assertRaises(ValueError):
            converter.convert(1.9)
        with self.assertRaises(ValueError):
            converter.convert_array([0, 0.5])

    def test_scan_to_mobility_is_linear_and_decreasing(self):
        converter = Scan2ImConverter(im_min=0.6, im_max=1.6, scan_max_index=1000)
        self.assertAlmostEqual(converter.convert(0), 1.6)
        self.assertAlmostEqual(converter.convert(500), 1.1)
        self.assertAlmostEqual(converter.convert(1000), 0.6)
        # Fractional scans are allowed (mean scan of a window)
        self.assertAlmostEqual(converter.convert(150.5), 1.6 - 0.1505)

    def test_tof_to_mz_spans_acquisition_range(self):
        converter = Tof2MzConverter(mz_min=100.0, mz_max=1700.0, tof_max_index=400000)
        self.assertAlmostEqual(converter.convert(0), 100.0)
        self.assertAlmostEqual(converter.convert(400000), 1700.0)
        midpoint = ((np.sqrt(100.0) + np.sqrt(1700.0)) / 2) ** 2
        self.assertAlmostEqual(converter.convert(200000), midpoint)

    def test_same_formula_for_scalar_and_array(self):
        converter = Tof2MzConverter(mz_min=100.0, mz_max=1700.0, tof_max_index=400000)
        values = converter.convert_array([10, 5000, 123456])
        self.assertEqual(values[1], converter.convert(5000))

    def test_non_positive_max_index_rejected(self):
        with self.assertRaises(ValueError):
            Scan2ImConverter(0.6, 1.6, 0)
        with self.assertRaises(ValueError):
            Tof2MzConverter(100.0, 1700.0, 0)


class FrameTests(unittest.TestCase):
    def _frame(self):
        return Frame(
            scan_offsets=np.array([0, 2, 2, 3]),
            tof_indices=np.array([10, 20, 5]),
            intensities=np.array([100, 200, 50]),
        )

    def test_sentinel(self):
        frame = Frame()
        self.assertTrue(frame.is_empty)
        self.assertEqual(frame.n_scans, 0)
        self.assertEqual(frame.index, 0)
        self.assertIs(frame.frame_type, FrameType.UNKNOWN)

    def test_scans(self):
        frame = self._frame()
        self.assertEqual(frame.n_scans, 3)
        self.assertEqual(len(frame), 3)
        tof, intensity = frame.get_scan(0)
        self.assertEqual(tof.tolist(), [10, 20])
        self.assertEqual(intensity.tolist(), [100, 200])
        self.assertEqual(frame.get_scan(1)[0].size, 0)
        self.assertEqual(frame.scan_indices().tolist(), [0, 0, 2])
        with self.assertRaises(IndexError):
            frame.get_scan(3)

    def test_dtypes_are_coerced(self):
        frame = self._frame()
        self.assertEqual(frame.tof_indices.dtype, np.uint32)
        self.assertEqual(frame.intensities.dtype, np.uint32)
        self.assertEqual(frame.scan_offsets.dtype, np.int64)

    def test_inconsistent_arrays_rejected(self):
        with self.assertRaises(ValueError):
            Frame(
                scan_offsets=np.array([0, 2]),
                tof_indices=np.array([1, 2, 3]),
                intensities=np.array([1, 2, 3]),
            )
        with self.assertRaises(ValueError):
            Frame(
                scan_offsets=np.array([0, 1]),
                tof_indices=np.array([1]),
                intensities=np.array([1, 2]),
            )

    def test_with_identity(self):
        frame = self._frame().with_identity(index=7, rt=12.5, frame_type=FrameType.MS1)
        self.assertEqual(frame.index, 7)
        self.assertEqual(frame.rt, 12.5)
        self.assertIs(frame.frame_type, FrameType.MS1)
        self.assertEqual(frame.n_peaks, 3)

    def test_calibrated_values(self):
        frame = self._frame()
        im = frame.im_values(Scan2ImConverter(0.6, 1.6, 1000))
        np.testing.assert_allclose(im, [1.6, 1.6, 1.598])
        mz = frame.mz_values(Tof2MzConverter(100.0, 1700.0, 400000))
        self.assertEqual(mz.shape, (3,))
        self.assertTrue(np.all(mz > 100.0))


class QuadrupoleSettingsTests(unittest.TestCase):
    def test_window_group_positions(self):
        self.assertEqual(window_group_to_position(1), 0)
        self.assertEqual(position_to_window_group(0), 1)
        with self.assertRaises(ValueError):
            window_group_to_position(0)

    def test_sorted_by_scan_start_permutes_all_lists(self):
        settings = QuadrupoleSettings(index=1)
        settings.append(450, 600, 800.0, 20.0, 25.0)
        settings.append(50, 250, 400.0, 21.0, 40.0)
        settings.append(300, 400, 600.0, 22.0, 30.0)
        ordered = settings.sorted_by_scan_start()
        self.assertEqual(ordered.scan_starts, [50, 300, 450])
        self.assertEqual(ordered.scan_ends, [250, 400, 600])
        self.assertEqual(ordered.isolation_mz, [400.0, 600.0, 800.0])
        self.assertEqual(ordered.isolation_width, [21.0, 22.0, 20.0])
        self.assertEqual(ordered.collision_energy, [40.0, 30.0, 25.0])
        self.assertEqual(ordered.index, 1)
        self.assertEqual(ordered.scan_range, (50, 600))

    def test_sort_keeps_ties_in_order(self):
        settings = QuadrupoleSettings(index=2)
        settings.append(100, 200, 1.0, 1.0, 1.0)
        settings.append(100, 300, 2.0, 1.0, 1.0)
        settings.append(50, 100, 3.0, 1.0, 1.0)
        self.assertEqual(settings.sorted_by_scan_start().isolation_mz, [3.0, 1.0, 2.0])

    def test_unequal_lengths_rejected(self):
        with self.assertRaises(ValueError):
            QuadrupoleSettings(index=1, scan_starts=[1], scan_ends=[2])

    def test_empty_group_has_no_scan_range(self):
        settings = QuadrupoleSettings(index=3)
        self.assertEqual(len(settings), 0)
        with self.assertRaises(ValueError):
            settings.scan_range


class PrecursorTests(unittest.TestCase):
    def test_defaults(self):
        precursor = Precursor(mz=500.0, rt=120.0)
        self.assertIsNone(precursor.charge)
        self.assertIsNone(precursor.intensity)
        self.assertEqual(precursor.rt_minutes, 2.0)


if __name__ == '__main__':
    unittest.main()
