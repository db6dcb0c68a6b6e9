"""Tests for sensor status bits and hub reset flags."""

import pytest

from tempest_api.core.domain import ResetFlags, SensorStatus, UnrecognizedResetFlagError
from tempest_api.core.domain.status import SENSOR_STATUS_BITS


class TestResetFlags:

    def test_two_labels(self):
        flags = ResetFlags.from_str("BOR,PIN")
        assert flags.brownout is True
        assert flags.pin is True
        assert flags == ResetFlags(brownout=True, pin=True)

    def test_every_label(self):
        flags = ResetFlags.from_str("BOR,PIN,POR,SFT,WDG,WWD,LPW,HRDFLT")
        assert all(vars(flags).values())

    def test_unrecognized_label(self):
        with pytest.raises(UnrecognizedResetFlagError) as exc_info:
            ResetFlags.from_str("BOR,XYZ")
        assert exc_info.value.label == "XYZ"
        assert isinstance(exc_info.value, ValueError)

    def test_labels_are_case_sensitive(self):
        with pytest.raises(UnrecognizedResetFlagError):
            ResetFlags.from_str("bor")

    def test_whitespace_and_empty_tokens(self):
        assert ResetFlags.from_str(" WDG , ,SFT,") == ResetFlags(watchdog=True, software=True)

    def test_empty_string(self):
        assert ResetFlags.from_str("") == ResetFlags()


class TestSensorStatus:

    def test_all_clear(self):
        status = SensorStatus.from_bits(0)
        assert not any(flag for _, flag in status.items())

    @pytest.mark.parametrize("name,mask", sorted(SENSOR_STATUS_BITS.items()))
    def test_single_bit(self, name, mask):
        status = SensorStatus.from_bits(mask)
        set_flags = [flag_name for flag_name, flag in status.items() if flag]
        assert set_flags == [name]

    def test_undefined_bits_are_ignored(self):
        status = SensorStatus.from_bits(0x200 | 0x4000 | 0x80000000)
        assert status == SensorStatus()

    def test_all_bits(self):
        status = SensorStatus.from_bits(0xFFFFFFFF)
        assert all(flag for _, flag in status.items())
        assert len(status.items()) == 11

    def test_items_follow_bit_order(self):
        names = [name for name, _ in SensorStatus().items()]
        assert names == list(SENSOR_STATUS_BITS)
