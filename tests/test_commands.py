import pytest

from rxlink.commands import build_dispense_command, order_ready, parse_ultrasonic


class TestBuildDispenseCommand:
    def test_skips_empty_slots(self):
        assert build_dispense_command([2, 0, 1]) == "SERVO1:2;SERVO3:1;MOTORS:10;"

    def test_single_slot(self):
        assert build_dispense_command([0, 3]) == "SERVO2:3;MOTORS:10;"

    def test_custom_motor_runs(self):
        assert build_dispense_command([1], motors=4) == "SERVO1:1;MOTORS:4;"

    def test_nothing_selected(self):
        with pytest.raises(ValueError):
            build_dispense_command([0, 0, 0])

    def test_negative_quantity(self):
        with pytest.raises(ValueError):
            build_dispense_command([2, -1])


class TestParseUltrasonic:
    def test_valid(self):
        assert parse_ultrasonic("ULTRASONIC:3") == 3
        assert parse_ultrasonic("ULTRASONIC: 12 ") == 12

    def test_other_lines(self):
        assert parse_ultrasonic("MOTORS:10;") is None
        assert parse_ultrasonic("ultrasonic:3") is None

    def test_malformed(self):
        assert parse_ultrasonic("ULTRASONIC:") is None
        assert parse_ultrasonic("ULTRASONIC:three") is None


def test_order_ready():
    assert order_ready(3, [2, 0, 1])
    assert order_ready(4, [2, 0, 1])
    assert not order_ready(2, [2, 0, 1])
