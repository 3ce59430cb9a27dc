"""
Integration tests for the hardware subsystem.

Tests the drivetrain and heading adapters, hub wrappers and bootstrap.
"""

import os
import unittest
from unittest import mock

from config.settings import DriveConfig, VortexConfig
from core.errors import (
    HardwareReadError, HardwareUnavailableError, HardwareWriteError, MotionError, SensorNotCalibratedError
)
from core.telemetry import LoggingTelemetry
from hardware import (
    Direction, Drivetrain, HeadingSensor, HubDcMotor, HubGyro, MockDcMotor, MockGyro,
    RunMode, SimClock, SimulatedRobot, heading_delta, init_auto, init_teleop, normalize_heading
)


class TestDrivetrain(unittest.TestCase):
    """Test the drivetrain actuator."""

    def setUp(self):
        """Set up test fixtures."""
        self.left = MockDcMotor("left")
        self.right = MockDcMotor("right")
        self.drivetrain = Drivetrain(self.left, self.right)

    def test_missing_motor(self):
        """Test that a missing handle is a hardware fault."""
        with self.assertRaises(HardwareUnavailableError):
            Drivetrain(self.left, None)

    def test_power_is_clamped(self):
        """Test power outside [-1, 1] is clamped."""
        self.drivetrain.set_power(1.7, -2.0)
        self.assertEqual(self.drivetrain.get_power(), (1.0, -1.0))

    def test_target_mode(self):
        """Test arming targets switches to run-to-position."""
        self.drivetrain.set_target_mode(100, -50)

        self.assertEqual(self.left.get_target_position(), 100)
        self.assertEqual(self.right.get_target_position(), -50)
        self.assertEqual(self.left.get_mode(), RunMode.RUN_TO_POSITION)
        self.assertEqual(self.drivetrain.is_busy(), (True, True))

    def test_read_glitch_reuses_last_ticks(self):
        """Test a failed encoder read reports the last good count."""
        self.left.position = 120.0
        self.right.position = 80.0
        self.assertEqual(self.drivetrain.get_ticks(), (120, 80))

        self.left.position = 200.0
        self.left.fail_next_reads(1)
        self.assertEqual(self.drivetrain.get_ticks(), (120, 80))
        self.assertEqual(self.drivetrain.get_ticks(), (200, 80))

    def test_fresh_read_does_not_reuse_ticks(self):
        """Test a fresh read raises instead of reporting an old count."""
        self.left.position = 120.0
        self.drivetrain.get_ticks()
        self.left.fail_next_reads(1)

        with self.assertRaises(HardwareReadError):
            self.drivetrain.get_ticks(allow_stale=False)
        self.assertEqual(self.drivetrain.get_ticks(allow_stale=False), (120, 0))

    def test_reset_encoders(self):
        """Test encoder reset zeroes counts and leaves passive mode."""
        self.left.position = 500.0
        self.drivetrain.reset_encoders()

        self.assertEqual(self.drivetrain.get_ticks(), (0, 0))
        self.assertEqual(self.left.get_mode(), RunMode.RUN_USING_ENCODER)
        self.assertEqual(self.right.get_mode(), RunMode.RUN_USING_ENCODER)

    def test_stop_survives_write_failure(self):
        """Test stop still zeroes the right side if the left write fails."""
        self.drivetrain.set_power(0.5, 0.5)
        with mock.patch.object(self.left, "set_power", side_effect=RuntimeError("bus lost")):
            self.drivetrain.stop()
        self.assertEqual(self.right.get_power(), 0.0)


class TestHeadingSensor(unittest.TestCase):
    """Test the heading sensor adapter."""

    def setUp(self):
        """Set up test fixtures."""
        self.clock = SimClock()
        self.gyro = MockGyro()
        self.clock.on_tick(self.gyro.step)
        self.heading = HeadingSensor(self.gyro, self.clock)

    def test_normalize(self):
        """Test angles map onto (-180, 180]."""
        self.assertEqual(normalize_heading(270.0), -90.0)
        self.assertEqual(normalize_heading(-180.0), 180.0)
        self.assertEqual(normalize_heading(180.0), 180.0)
        self.assertEqual(normalize_heading(725.0), 5.0)

    def test_delta_across_boundary(self):
        """Test signed displacement does not jump at +/-180."""
        self.assertAlmostEqual(heading_delta(179.0, -179.0), 2.0)
        self.assertAlmostEqual(heading_delta(-179.0, 179.0), -2.0)
        self.assertAlmostEqual(heading_delta(350.0, 10.0), 20.0)

    def test_wrap_360_sensor(self):
        """Test a [0, 360) sensor is normalized."""
        self.gyro.wrap_360 = True
        self.gyro.set_heading(-30.0)
        self.assertEqual(self.heading.get_heading(), -30.0)

    def test_missing_sensor(self):
        """Test a missing handle is a hardware fault."""
        with self.assertRaises(HardwareUnavailableError):
            HeadingSensor(None, self.clock)

    def test_ensure_ready_waits_for_calibration(self):
        """Test readiness wait returns once calibration finishes."""
        self.gyro.calibration_sec = 0.3
        self.heading.calibrate()
        self.assertFalse(self.heading.is_calibrated())

        self.heading.ensure_ready(1.0)

        self.assertTrue(self.heading.is_calibrated())
        self.assertGreaterEqual(self.clock.now(), 0.3)

    def test_ensure_ready_times_out(self):
        """Test an uncalibrated sensor fails after the bounded wait."""
        self.gyro.never_ready = True

        with self.assertRaises(SensorNotCalibratedError):
            self.heading.ensure_ready(0.5)
        self.assertLess(self.clock.now(), 0.5 + 0.1)

    def test_glitch_reuses_last_heading(self):
        """Test a failed read reports the last good heading."""
        self.gyro.set_heading(42.0)
        self.assertEqual(self.heading.get_heading(), 42.0)

        self.gyro.set_heading(50.0)
        self.gyro.fail_next_reads(1)
        self.assertEqual(self.heading.get_heading(), 42.0)
        self.assertEqual(self.heading.get_heading(), 50.0)

    def test_fresh_read_does_not_reuse_heading(self):
        """Test a fresh read raises even when a cached heading exists."""
        self.gyro.set_heading(42.0)
        self.heading.get_heading()
        self.gyro.fail_next_reads(1)

        with self.assertRaises(HardwareReadError):
            self.heading.get_heading(allow_stale=False)

    def test_first_read_glitch_raises(self):
        """Test there is nothing to fall back on before the first read."""
        self.gyro.fail_next_reads(1)
        with self.assertRaises(HardwareReadError):
            self.heading.get_heading()


class TestHubWrappers(unittest.TestCase):
    """Test vendor handle wrappers."""

    def test_motor_delegates(self):
        """Test calls reach the vendor handle with vendor names."""
        device = mock.Mock()
        device.getCurrentPosition.return_value = 1234
        device.isBusy.return_value = True
        motor = HubDcMotor(device, "left_drive")

        motor.set_power(0.5)
        motor.set_mode(RunMode.RUN_TO_POSITION)
        motor.set_direction(Direction.REVERSE)
        motor.set_target_position(2000)

        device.setPower.assert_called_once_with(0.5)
        device.setMode.assert_called_once_with("RUN_TO_POSITION")
        device.setDirection.assert_called_once_with("REVERSE")
        device.setTargetPosition.assert_called_once_with(2000)
        self.assertEqual(motor.get_current_position(), 1234)
        self.assertTrue(motor.is_busy())

    def test_motor_io_error_becomes_read_error(self):
        """Test vendor I/O failures surface as transient read errors."""
        device = mock.Mock()
        device.getCurrentPosition.side_effect = OSError("i2c timeout")
        device.isBusy.side_effect = OSError("i2c timeout")
        motor = HubDcMotor(device, "left_drive")

        with self.assertRaises(HardwareReadError):
            motor.get_current_position()
        with self.assertRaises(HardwareReadError):
            motor.is_busy()

    def test_io_error_on_commands_is_a_motion_error(self):
        """Test vendor I/O failures on writes surface as motion faults."""
        device = mock.Mock()
        device.setPower.side_effect = OSError("i2c timeout")
        device.setMode.side_effect = OSError("i2c timeout")
        motor = HubDcMotor(device, "left_drive")

        with self.assertRaises(HardwareWriteError):
            motor.set_power(0.5)
        with self.assertRaises(MotionError):
            motor.set_mode(RunMode.RUN_TO_POSITION)

        gyro = HubGyro(mock.Mock())
        gyro.device.isCalibrating.side_effect = OSError("i2c timeout")
        with self.assertRaises(HardwareReadError):
            gyro.is_calibrating()

    def test_gyro_sign(self):
        """Test clockwise vendor headings become counter-clockwise positive."""
        device = mock.Mock()
        device.getHeading.return_value = 30
        device.isCalibrating.return_value = False
        gyro = HubGyro(device)

        self.assertEqual(gyro.get_heading(), -30.0)
        self.assertFalse(gyro.is_calibrating())


class TestBootstrap(unittest.TestCase):
    """Test hardware bootstrap."""

    def setUp(self):
        """Set up test fixtures."""
        self.robot = SimulatedRobot(gyro_calibration_sec=0.5)
        self.robot.left.position = 300.0
        self.robot.left.power = 0.3
        self.telemetry = LoggingTelemetry()

    def test_init_auto(self):
        """Test motors at rest, encoders zeroed and gyro ready."""
        hw = init_auto(self.robot.hardware_map(), self.robot.clock, telemetry=self.telemetry)

        self.assertEqual(hw.drivetrain.get_ticks(), (0, 0))
        self.assertEqual(hw.drivetrain.get_power(), (0.0, 0.0))
        self.assertEqual(self.robot.left.direction, Direction.REVERSE)
        self.assertEqual(self.robot.right.direction, Direction.FORWARD)
        self.assertEqual(self.robot.left.get_mode(), RunMode.RUN_USING_ENCODER)
        self.assertEqual(self.robot.shooter.get_mode(), RunMode.RUN_WITHOUT_ENCODER)
        self.assertEqual(self.robot.ball_release.position, VortexConfig().launch.release_hold_position)
        self.assertTrue(hw.heading.is_calibrated())
        self.assertEqual(self.telemetry.last("Status"), "Ready to run")

    def test_missing_device(self):
        """Test a missing device is reported by name."""
        devices = self.robot.hardware_map()
        del devices["right_drive"]

        with self.assertRaises(HardwareUnavailableError) as ctx:
            init_auto(devices, self.robot.clock)
        self.assertIn("right_drive", str(ctx.exception))

    def test_gyro_never_ready(self):
        """Test bootstrap fails fast when the gyro never calibrates."""
        self.robot.gyro.never_ready = True

        with self.assertRaises(SensorNotCalibratedError):
            init_auto(self.robot.hardware_map(), self.robot.clock)

    def test_vendor_handles_are_wrapped(self):
        """Test raw vendor objects are wrapped with hub implementations."""
        devices = {name: mock.Mock() for name in self.robot.hardware_map()}
        for name in ("left_drive", "right_drive"):
            devices[name].getCurrentPosition.return_value = 0
        devices["gyro_sensor"].isCalibrating.return_value = False

        hw = init_auto(devices, self.robot.clock)

        self.assertIsInstance(hw.drivetrain.left, HubDcMotor)
        devices["left_drive"].setDirection.assert_called_with("REVERSE")
        devices["left_drive"].setMode.assert_called_with("RUN_USING_ENCODER")
        devices["gyro_sensor"].calibrate.assert_called_once_with()

    def test_init_teleop(self):
        """Test teleop runs every motor open loop."""
        hw = init_teleop(self.robot.hardware_map(), self.robot.clock)

        self.assertEqual(self.robot.left.get_mode(), RunMode.RUN_WITHOUT_ENCODER)
        self.assertEqual(self.robot.right.get_mode(), RunMode.RUN_WITHOUT_ENCODER)
        self.assertEqual(hw.drivetrain.get_power(), (0.0, 0.0))


class TestConfig(unittest.TestCase):
    """Test configuration."""

    def test_ticks_per_inch(self):
        """Test encoder conversion from wheel geometry."""
        cfg = DriveConfig()
        self.assertAlmostEqual(cfg.ticks_per_inch, 229.1831, places=3)

    def test_from_env(self):
        """Test environment overrides."""
        env = {
            "VORTEX_DRIVE_SPEED": "0.4",
            "VORTEX_TIME_BUDGET_SEC": "20",
            "VORTEX_MISSION": "launch(1)",
            "VORTEX_LOG_LEVEL": "debug",
        }
        with mock.patch.dict(os.environ, env):
            config = VortexConfig.from_env()

        self.assertEqual(config.drive.drive_speed, 0.4)
        self.assertEqual(config.mission.time_budget_sec, 20.0)
        self.assertEqual(config.mission.script, "launch(1)")
        self.assertEqual(config.log_level, "DEBUG")


if __name__ == '__main__':
    unittest.main()
